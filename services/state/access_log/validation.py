"""Pydantic request-validation models for Access Log Service API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.state.access_log.domain import ALL_FILTER, AccessRole, AccessStatus


def _filter_value(value: object) -> object:
    """Map blank or ``ALL`` filters to ``None``."""
    if isinstance(value, str):
        stripped = value.strip()
        if stripped == "" or stripped.upper() == ALL_FILTER:
            return None
        return stripped
    return value


class ListAccessLogsRequest(BaseModel):
    """Pagination and filter request; ``ALL`` or blank means no filter."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    page: int = Field(default=1, gt=0)
    limit: int = Field(gt=0)
    status: AccessStatus | None = None
    role: AccessRole | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: object) -> object:
        value = _filter_value(value)
        return value.upper() if isinstance(value, str) else value

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value: object) -> object:
        value = _filter_value(value)
        return value.lower() if isinstance(value, str) else value


class PurgeRequest(BaseModel):
    """Retention purge request with an optional explicit clock."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    now: datetime | None = None
