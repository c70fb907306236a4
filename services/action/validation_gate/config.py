"""Pydantic settings for Validation Gate Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.portal_shared.config import PortalSettings, resolve_component_settings
from services.action.validation_gate.component import SERVICE_COMPONENT_ID
from services.state.access_log.domain import VALIDATE_SUBJECT_ACTION


class ValidationGateSettings(BaseModel):
    """Validation Gate runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    required_fields: tuple[str, ...] = ("name",)
    exit_team_email: str = Field(default="exit-team@example.com", min_length=3)
    blocked_message: str = (
        "Maximum attempts reached. Please reach out to exit team - {exit_team_email}"
    )
    access_log_action: str = Field(default=VALIDATE_SUBJECT_ACTION, min_length=1)
    admin_ids: tuple[str, ...] = ()

    @field_validator("required_fields")
    @classmethod
    def _clean_required_fields(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(item.strip() for item in value if item.strip())
        if not cleaned:
            raise ValueError("required_fields must name at least one field")
        return cleaned

    @field_validator("admin_ids")
    @classmethod
    def _clean_admin_ids(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(item.strip().lower() for item in value if item.strip())

    def is_admin(self, principal: str) -> bool:
        """Return whether one principal is on the admin allow-list."""
        return principal.strip().lower() in self.admin_ids

    def render_blocked_message(self) -> str:
        return self.blocked_message.format(exit_team_email=self.exit_team_email)


def resolve_validation_gate_settings(
    settings: PortalSettings,
) -> ValidationGateSettings:
    """Resolve settings from ``components.service.validation_gate``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=ValidationGateSettings,
    )
