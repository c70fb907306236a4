"""Attempt Ledger-owned Postgres runtime wiring."""

from __future__ import annotations

from dataclasses import dataclass

from packages.portal_shared.config import PortalSettings
from resources.substrates.postgres import (
    ServiceSchemaSessionProvider,
    SharedPostgresSubstrate,
    resolve_postgres_settings,
)
from services.state.attempt_ledger.component import MANIFEST


@dataclass(frozen=True)
class AttemptLedgerPostgresRuntime:
    """Schema-scoped Postgres access for the attempt ledger."""

    substrate: SharedPostgresSubstrate
    schema_sessions: ServiceSchemaSessionProvider

    @classmethod
    def from_settings(cls, settings: PortalSettings) -> "AttemptLedgerPostgresRuntime":
        substrate = SharedPostgresSubstrate(settings=resolve_postgres_settings(settings))
        return cls.from_substrate(substrate)

    @classmethod
    def from_substrate(
        cls, substrate: SharedPostgresSubstrate
    ) -> "AttemptLedgerPostgresRuntime":
        return cls(
            substrate=substrate,
            schema_sessions=substrate.schema_sessions(attempt_ledger_schema()),
        )


def attempt_ledger_schema() -> str:
    """Resolve the ledger schema name from component identity."""
    return MANIFEST.schema_name
