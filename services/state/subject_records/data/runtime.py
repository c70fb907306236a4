"""Subject Records-owned Postgres runtime wiring."""

from __future__ import annotations

from dataclasses import dataclass

from packages.portal_shared.config import PortalSettings
from resources.substrates.postgres import (
    ServiceSchemaSessionProvider,
    SharedPostgresSubstrate,
    resolve_postgres_settings,
)
from services.state.subject_records.component import MANIFEST


@dataclass(frozen=True)
class SubjectRecordsPostgresRuntime:
    """Schema-scoped Postgres access for canonical subject records."""

    substrate: SharedPostgresSubstrate
    schema_sessions: ServiceSchemaSessionProvider

    @classmethod
    def from_settings(cls, settings: PortalSettings) -> "SubjectRecordsPostgresRuntime":
        substrate = SharedPostgresSubstrate(settings=resolve_postgres_settings(settings))
        return cls.from_substrate(substrate)

    @classmethod
    def from_substrate(
        cls, substrate: SharedPostgresSubstrate
    ) -> "SubjectRecordsPostgresRuntime":
        return cls(
            substrate=substrate,
            schema_sessions=substrate.schema_sessions(subject_records_schema()),
        )


def subject_records_schema() -> str:
    return MANIFEST.schema_name
