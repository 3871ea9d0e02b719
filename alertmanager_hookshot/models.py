"""Pydantic models for the Alertmanager webhook payload, hookshot messages and settings."""

import os
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class AlertStatus(str, Enum):
    """Alert state reported by Alertmanager."""

    FIRING = "firing"
    RESOLVED = "resolved"


class Alert(BaseModel):
    """Individual alert within an Alertmanager notification."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = ""
    labels: Dict[str, Any] = Field(default_factory=dict)
    annotations: Dict[str, Any] = Field(default_factory=dict)
    starts_at: str = Field(default="", alias="startsAt")
    ends_at: str = Field(default="", alias="endsAt")
    generator_url: str = Field(default="", alias="generatorURL")
    fingerprint: str = ""

    @field_validator("status", "starts_at", "ends_at", "generator_url", "fingerprint", mode="before")
    @classmethod
    def blank_if_null(cls, v: Any) -> Any:
        """Treat explicit nulls as blank strings."""
        return "" if v is None else v

    @field_validator("labels", "annotations", mode="before")
    @classmethod
    def empty_if_null(cls, v: Any) -> Any:
        """Treat explicit nulls as empty mappings and null values as blank text."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {key: "" if value is None else value for key, value in v.items()}
        return v

    @property
    def severity(self) -> str:
        return str(self.labels.get("severity", ""))

    @property
    def alertname(self) -> str:
        return str(self.labels.get("alertname", ""))

    @property
    def is_firing(self) -> bool:
        return self.status == AlertStatus.FIRING.value


class AlertGroup(BaseModel):
    """Alertmanager webhook payload structure.

    Every field is optional so that a bare ``{"alerts": null}`` body still
    validates and takes the empty message path.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: str = Field(default="4")
    group_key: str = Field(default="", alias="groupKey")
    truncated_alerts: int = Field(default=0, alias="truncatedAlerts", ge=0)
    status: str = ""
    receiver: str = ""
    group_labels: Dict[str, Any] = Field(default_factory=dict, alias="groupLabels")
    common_labels: Dict[str, Any] = Field(default_factory=dict, alias="commonLabels")
    common_annotations: Dict[str, Any] = Field(default_factory=dict, alias="commonAnnotations")
    external_url: str = Field(default="", alias="externalURL")
    alerts: Optional[List[Alert]] = None

    @field_validator("group_labels", "common_labels", "common_annotations", mode="before")
    @classmethod
    def empty_if_null(cls, v: Any) -> Any:
        """Treat explicit nulls as empty mappings."""
        return {} if v is None else v

    @field_validator("truncated_alerts", mode="before")
    @classmethod
    def zero_if_null(cls, v: Any) -> Any:
        """Treat an explicit null count as zero."""
        return 0 if v is None else v

    @field_validator("version", "group_key", "status", "receiver", "external_url", mode="before")
    @classmethod
    def blank_if_null(cls, v: Any) -> Any:
        """Treat explicit nulls as blank strings."""
        return "" if v is None else v


class MessageRecord(BaseModel):
    """Message body accepted by a hookshot generic webhook (``v2`` schema)."""

    version: Literal["v2"] = "v2"
    empty: Optional[bool] = None
    plain: Optional[str] = None
    html: Optional[str] = None
    msgtype: Literal["m.text"] = "m.text"

    @model_validator(mode="after")
    def check_body(self) -> "MessageRecord":
        """A record is either empty or carries both renderings."""
        if self.empty:
            if self.plain is not None or self.html is not None:
                raise ValueError("An empty record cannot carry plain or html text")
        elif self.plain is None or self.html is None:
            raise ValueError("A record needs both plain and html, or empty=True")
        return self

    @classmethod
    def empty_record(cls) -> "MessageRecord":
        """Record sent when the payload carries no alerts."""
        return cls(empty=True)

    @classmethod
    def text(cls, plain: str, html: str) -> "MessageRecord":
        """Record carrying a rendered alert."""
        return cls(plain=plain, html=html)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready body, without the fields that do not apply."""
        return self.model_dump(exclude_none=True)


def _silence_url_from_env() -> str:
    return os.getenv("ALERTMANAGER_URL") or os.getenv("GRAFANA_URL", "")


# Configuration models

class RelaySettings(BaseModel):
    """Relay configuration, read from the environment once at startup."""

    model_config = ConfigDict(validate_default=True)

    upstream: str = Field(
        default_factory=lambda: os.getenv("UPSTREAM", ""),
        description="Hookshot webhook base URL; the route ID is appended to it"
    )
    silence_url: str = Field(
        default_factory=_silence_url_from_env,
        description="Alertmanager base URL used to build silence links"
    )
    host: str = Field(
        default_factory=lambda: os.getenv("HOST", "0.0.0.0"),
        description="Listening address"
    )
    port: int = Field(
        default_factory=lambda: int(os.getenv("PORT", "3000")),
        description="Listening port",
        ge=1,
        le=65535
    )
    timeout: float = Field(
        default_factory=lambda: float(os.getenv("FORWARD_TIMEOUT", "10")),
        description="Upstream HTTP timeout in seconds",
        gt=0
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"),
        description="Log level"
    )

    @field_validator("upstream")
    @classmethod
    def validate_upstream(cls, v: str) -> str:
        """Validate upstream URL format."""
        if not v:
            raise ValueError("UPSTREAM must be set")
        if not v.startswith(("http://", "https://")):
            raise ValueError("Upstream URL must start with http:// or https://")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of {LOG_LEVELS}")
        return level
