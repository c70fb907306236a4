"""Domain contracts for Access Log Service payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_ACTION = "LOGIN"
VALIDATE_SUBJECT_ACTION = "VALIDATE_SUBJECT"
ALL_FILTER = "ALL"


class AccessRole(str, Enum):
    ADMIN = "admin"
    VERIFIER = "verifier"
    UNKNOWN = "unknown"


class AccessStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class AccessEvent(BaseModel):
    """One access event to record."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    email: str = Field(min_length=1, max_length=320)
    status: AccessStatus
    role: AccessRole = AccessRole.UNKNOWN
    action: str = Field(default=DEFAULT_ACTION, min_length=1, max_length=64)
    ip_address: str | None = None
    user_agent: str | None = None
    failure_reason: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized == "":
            raise ValueError("email is required")
        return normalized


class AccessLogEntry(AccessEvent):
    """Recorded access event with identity and timestamp."""

    id: str
    timestamp: datetime


class AccessLogPage(BaseModel):
    """One page of access log entries, newest first."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    entries: list[AccessLogEntry]
    total: int
    pages: int
    page: int
    limit: int


class HealthStatus(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    substrate_ready: bool
    detail: str
