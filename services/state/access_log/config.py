"""Pydantic settings for Access Log Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.portal_shared.config import PortalSettings, resolve_component_settings
from services.state.access_log.component import SERVICE_COMPONENT_ID


class AccessLogSettings(BaseModel):
    """Access Log runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    retention_days: int = Field(default=90, gt=0)
    default_page_size: int = Field(default=20, gt=0)
    max_page_size: int = Field(default=200, gt=0)


def resolve_access_log_settings(settings: PortalSettings) -> AccessLogSettings:
    """Resolve settings from ``components.service.access_log``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=AccessLogSettings,
    )
