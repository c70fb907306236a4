"""Domain contracts for Subject Records Service payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

NAME_FIELD = "name"


class CanonicalRecord(BaseModel):
    """Authoritative identity record for one former employee.

    The ``name`` comparison field maps to ``full_name``; every other field maps
    to the attribute with the same key.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    subject_id: str = Field(min_length=1, max_length=64)
    full_name: str = Field(min_length=1)
    attributes: dict[str, str] = Field(default_factory=dict)

    @field_validator("subject_id")
    @classmethod
    def _canonical_subject_id(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("attributes")
    @classmethod
    def _clean_attribute_keys(cls, value: dict[str, str]) -> dict[str, str]:
        cleaned = {key.strip(): item for key, item in value.items() if key.strip()}
        if NAME_FIELD in cleaned:
            raise ValueError("attributes must not redefine 'name'; use full_name")
        return cleaned

    def value_for(self, field: str) -> str | None:
        """Return the canonical value a submitted field compares against."""
        if field == NAME_FIELD:
            return self.full_name
        return self.attributes.get(field)


class HealthStatus(BaseModel):
    """Subject Records and owned dependency readiness status."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    substrate_ready: bool
    detail: str
