"""Relay Prometheus Alertmanager notifications to a Matrix hookshot webhook."""

__version__ = "0.1.0"
