"""Access Log-owned Postgres runtime wiring."""

from __future__ import annotations

from dataclasses import dataclass

from packages.portal_shared.config import PortalSettings
from resources.substrates.postgres import (
    ServiceSchemaSessionProvider,
    SharedPostgresSubstrate,
    resolve_postgres_settings,
)
from services.state.access_log.component import MANIFEST


@dataclass(frozen=True)
class AccessLogPostgresRuntime:
    """Schema-scoped Postgres access for the access log."""

    substrate: SharedPostgresSubstrate
    schema_sessions: ServiceSchemaSessionProvider

    @classmethod
    def from_settings(cls, settings: PortalSettings) -> "AccessLogPostgresRuntime":
        substrate = SharedPostgresSubstrate(settings=resolve_postgres_settings(settings))
        return cls.from_substrate(substrate)

    @classmethod
    def from_substrate(
        cls, substrate: SharedPostgresSubstrate
    ) -> "AccessLogPostgresRuntime":
        return cls(
            substrate=substrate,
            schema_sessions=substrate.schema_sessions(access_log_schema()),
        )


def access_log_schema() -> str:
    return MANIFEST.schema_name
