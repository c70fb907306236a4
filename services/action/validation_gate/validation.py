"""Pydantic request-validation models for Validation Gate Service API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


def _required_text(value: str, info: ValidationInfo) -> str:
    normalized = value.strip()
    if normalized == "":
        raise ValueError(f"{info.field_name} is required")
    return normalized


class ValidateRequest(BaseModel):
    """One validation attempt for a (requester, subject) pair."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    requester_id: str = Field(max_length=320)
    subject_id: str = Field(max_length=64)
    submitted_fields: dict[str, str] = Field(min_length=1)

    @field_validator("requester_id")
    @classmethod
    def _validate_requester(cls, value: str, info: ValidationInfo) -> str:
        return _required_text(value, info)

    @field_validator("subject_id")
    @classmethod
    def _validate_subject(cls, value: str, info: ValidationInfo) -> str:
        return _required_text(value, info).upper()

    @field_validator("submitted_fields")
    @classmethod
    def _clean_field_names(cls, value: dict[str, str]) -> dict[str, str]:
        cleaned = {key.strip(): item for key, item in value.items()}
        if "" in cleaned:
            raise ValueError("submitted field names must not be blank")
        if len(cleaned) != len(value):
            raise ValueError("duplicate submitted field name")
        return cleaned

    def missing_fields(self, required: tuple[str, ...]) -> list[str]:
        """Return required fields that are absent or blank."""
        return [
            field
            for field in required
            if self.submitted_fields.get(field, "").strip() == ""
        ]
