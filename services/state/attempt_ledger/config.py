"""Pydantic settings for Attempt Ledger Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.portal_shared.config import PortalSettings, resolve_component_settings
from services.state.attempt_ledger.component import SERVICE_COMPONENT_ID


class AttemptLedgerSettings(BaseModel):
    """Attempt Ledger runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: int = Field(default=3, gt=0)
    list_limit: int = Field(default=500, gt=0)


def resolve_attempt_ledger_settings(settings: PortalSettings) -> AttemptLedgerSettings:
    """Resolve settings from ``components.service.attempt_ledger``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=AttemptLedgerSettings,
    )
