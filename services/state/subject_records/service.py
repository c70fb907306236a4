"""Authoritative in-process Python API for Subject Records Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.portal_shared.config import PortalSettings
from packages.portal_shared.envelope import Envelope, EnvelopeMeta
from resources.substrates.postgres import SharedPostgresSubstrate
from services.state.subject_records.domain import CanonicalRecord, HealthStatus


class SubjectRecordsService(ABC):
    """Public API for the authoritative employee record lookup."""

    @abstractmethod
    def lookup_subject(
        self, *, meta: EnvelopeMeta, subject_id: str
    ) -> Envelope[CanonicalRecord | None]:
        """Resolve one subject; ``None`` payload when no record exists."""

    @abstractmethod
    def upsert_subject(
        self, *, meta: EnvelopeMeta, record: CanonicalRecord
    ) -> Envelope[CanonicalRecord]:
        """Create or replace one canonical record."""

    @abstractmethod
    def list_subjects(
        self, *, meta: EnvelopeMeta, limit: int = 100
    ) -> Envelope[list[CanonicalRecord]]:
        """List canonical records ordered by subject id."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and backing store readiness."""


def build_subject_records_service(
    *,
    settings: PortalSettings,
    substrate: SharedPostgresSubstrate | None = None,
) -> SubjectRecordsService:
    """Build the default Postgres-backed subject records service."""
    from services.state.subject_records.config import (
        resolve_subject_records_settings,
    )
    from services.state.subject_records.data import (
        PostgresSubjectRepository,
        SubjectRecordsPostgresRuntime,
    )
    from services.state.subject_records.implementation import (
        DefaultSubjectRecordsService,
    )

    runtime = (
        SubjectRecordsPostgresRuntime.from_settings(settings)
        if substrate is None
        else SubjectRecordsPostgresRuntime.from_substrate(substrate)
    )
    return DefaultSubjectRecordsService(
        settings=resolve_subject_records_settings(settings),
        repository=PostgresSubjectRepository(runtime.schema_sessions),
    )
