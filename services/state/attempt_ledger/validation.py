"""Pydantic request-validation models for Attempt Ledger Service API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class _ValidationModel(BaseModel):
    """Base request model with strict shape semantics."""

    model_config = ConfigDict(frozen=True, extra="forbid")


def _required_text(value: str, info: ValidationInfo) -> str:
    normalized = value.strip()
    if normalized == "":
        raise ValueError(f"{info.field_name} is required")
    return normalized


class RequesterRequest(_ValidationModel):
    """Request keyed by one requester identity."""

    requester_id: str = Field(max_length=320)

    @field_validator("requester_id")
    @classmethod
    def _validate_requester(cls, value: str, info: ValidationInfo) -> str:
        return _required_text(value, info)


class PairRequest(RequesterRequest):
    """Request keyed by one (requester, subject) pair.

    Subject identifiers are case-insensitive and stored uppercase.
    """

    subject_id: str = Field(max_length=64)

    @field_validator("subject_id")
    @classmethod
    def _validate_subject(cls, value: str, info: ValidationInfo) -> str:
        return _required_text(value, info).upper()


class ListAttemptsRequest(_ValidationModel):
    """Filter for administrative attempt listings."""

    requester_id: str | None = None
    blocked_only: bool = False
    limit: int = Field(default=100, gt=0)

    @field_validator("requester_id")
    @classmethod
    def _blank_means_all(cls, value: str | None) -> str | None:
        if value is None or value.strip() == "":
            return None
        return value.strip()
