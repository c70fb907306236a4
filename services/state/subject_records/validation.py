"""Pydantic request-validation models for Subject Records Service API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ValidationModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SubjectIdRequest(_ValidationModel):
    """Validated request for subject-id keyed lookups."""

    subject_id: str = Field(max_length=64)

    @field_validator("subject_id")
    @classmethod
    def _validate_subject_id(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized == "":
            raise ValueError("subject_id is required")
        return normalized


class ListSubjectsRequest(_ValidationModel):
    limit: int = Field(default=100, gt=0)
