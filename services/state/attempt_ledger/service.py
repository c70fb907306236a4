"""Authoritative in-process Python API for Attempt Ledger Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.portal_shared.config import PortalSettings
from packages.portal_shared.envelope import Envelope, EnvelopeMeta
from resources.substrates.postgres import SharedPostgresSubstrate
from services.state.attempt_ledger.domain import (
    AttemptState,
    HealthStatus,
    IncrementResult,
    SuccessResult,
)


class AttemptLedgerService(ABC):
    """Public API for per-(requester, subject) failed-attempt accounting."""

    @abstractmethod
    def get_attempt(
        self, *, meta: EnvelopeMeta, requester_id: str, subject_id: str
    ) -> Envelope[AttemptState | None]:
        """Read one pair's attempt state; ``None`` payload when never attempted."""

    @abstractmethod
    def is_blocked(
        self, *, meta: EnvelopeMeta, requester_id: str, subject_id: str
    ) -> Envelope[bool]:
        """Return whether one pair is currently hard-blocked."""

    @abstractmethod
    def increment_failure(
        self, *, meta: EnvelopeMeta, requester_id: str, subject_id: str
    ) -> Envelope[IncrementResult]:
        """Atomically count one failed attempt for a pair."""

    @abstractmethod
    def record_success(
        self, *, meta: EnvelopeMeta, requester_id: str, subject_id: str
    ) -> Envelope[SuccessResult]:
        """Clear an unblocked pair's streak after a successful validation.

        A blocked pair is left untouched and reported with ``blocked=True``.
        """

    @abstractmethod
    def reset(
        self, *, meta: EnvelopeMeta, requester_id: str, subject_id: str
    ) -> Envelope[AttemptState | None]:
        """Zero one pair's failure streak and lift any block."""

    @abstractmethod
    def reset_requester(self, *, meta: EnvelopeMeta, requester_id: str) -> Envelope[int]:
        """Reset every pair for one requester; payload is rows touched."""

    @abstractmethod
    def clear_requester(self, *, meta: EnvelopeMeta, requester_id: str) -> Envelope[int]:
        """Delete every pair record for one requester; payload is rows deleted."""

    @abstractmethod
    def list_attempts(
        self,
        *,
        meta: EnvelopeMeta,
        requester_id: str | None = None,
        blocked_only: bool = False,
        limit: int = 100,
    ) -> Envelope[list[AttemptState]]:
        """List pair states for administration, newest attempt first."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return ledger and backing store readiness."""


def build_attempt_ledger_service(
    *,
    settings: PortalSettings,
    substrate: SharedPostgresSubstrate | None = None,
) -> AttemptLedgerService:
    """Build the default Postgres-backed ledger from typed settings."""
    from services.state.attempt_ledger.config import resolve_attempt_ledger_settings
    from services.state.attempt_ledger.data import (
        AttemptLedgerPostgresRuntime,
        PostgresAttemptRepository,
    )
    from services.state.attempt_ledger.implementation import (
        DefaultAttemptLedgerService,
    )

    runtime = (
        AttemptLedgerPostgresRuntime.from_settings(settings)
        if substrate is None
        else AttemptLedgerPostgresRuntime.from_substrate(substrate)
    )
    return DefaultAttemptLedgerService(
        settings=resolve_attempt_ledger_settings(settings),
        repository=PostgresAttemptRepository(runtime.schema_sessions),
    )
