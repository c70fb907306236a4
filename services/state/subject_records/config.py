"""Pydantic settings for Subject Records Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.portal_shared.config import PortalSettings, resolve_component_settings
from services.state.subject_records.component import SERVICE_COMPONENT_ID


class SubjectRecordsSettings(BaseModel):
    """Subject Records runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_list_limit: int = Field(default=500, gt=0)


def resolve_subject_records_settings(
    settings: PortalSettings,
) -> SubjectRecordsSettings:
    """Resolve settings from ``components.service.subject_records``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=SubjectRecordsSettings,
    )
