"""Pytest configuration and shared fixtures."""

import json
from typing import Callable, List, Optional

import httpx
import pytest

from alertmanager_hookshot.models import RelaySettings

UPSTREAM = "http://hookshot.test/webhook"
SILENCE_URL = "https://alertmanager.test/#/silences/new"


class UpstreamRecorder:
    """Fake hookshot endpoint that records every request it receives."""

    def __init__(self, responder: Optional[Callable[[httpx.Request, int], httpx.Response]] = None):
        self.requests: List[httpx.Request] = []
        self._responder = responder

    def __call__(self, request: httpx.Request) -> httpx.Response:
        index = len(self.requests)
        self.requests.append(request)
        if self._responder is None:
            return httpx.Response(200, text="OK")
        return self._responder(request, index)

    @property
    def bodies(self) -> List[dict]:
        return [json.loads(request.content) for request in self.requests]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def settings():
    """Relay settings pointing at the fake upstream."""
    return RelaySettings(upstream=UPSTREAM, silence_url=SILENCE_URL, log_level="DEBUG")


@pytest.fixture
def recorder():
    """Upstream that accepts everything."""
    return UpstreamRecorder()


@pytest.fixture
def critical_alert():
    """Firing critical alert as sent by Alertmanager."""
    return {
        "status": "firing",
        "labels": {"severity": "critical", "alertname": "DiskFull"},
        "annotations": {"summary": "disk at 95%"},
        "startsAt": "2024-05-01T10:00:00Z",
        "endsAt": "0001-01-01T00:00:00Z",
        "generatorURL": "http://prometheus.test/graph?g0.expr=disk",
        "fingerprint": "c0ffee",
    }


@pytest.fixture
def resolved_alert():
    """Resolved warning alert."""
    return {
        "status": "resolved",
        "labels": {"alertname": "HighLatency", "severity": "warning", "instance": "api-1"},
        "annotations": {"description": "p99 above 2s"},
        "startsAt": "2024-05-01T09:00:00Z",
        "endsAt": "2024-05-01T09:30:00Z",
        "generatorURL": "http://prometheus.test/graph?g0.expr=latency",
        "fingerprint": "beef01",
    }


@pytest.fixture
def make_group():
    """Build an Alertmanager webhook payload around a list of alerts."""

    def _make_group(alerts):
        return {
            "version": "4",
            "groupKey": '{}:{alertname="DiskFull"}',
            "truncatedAlerts": 0,
            "status": "firing",
            "receiver": "matrix",
            "groupLabels": {"alertname": "DiskFull"},
            "commonLabels": {},
            "commonAnnotations": {},
            "externalURL": "http://alertmanager.test",
            "alerts": alerts,
        }

    return _make_group


@pytest.fixture
def make_upstream():
    """Build a fake upstream with a custom ``(request, index) -> Response`` responder."""
    return UpstreamRecorder
