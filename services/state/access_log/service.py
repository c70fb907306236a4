"""Authoritative in-process Python API for Access Log Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from packages.portal_shared.config import PortalSettings
from packages.portal_shared.envelope import Envelope, EnvelopeMeta
from resources.substrates.postgres import SharedPostgresSubstrate
from services.state.access_log.domain import (
    AccessEvent,
    AccessLogEntry,
    AccessLogPage,
    HealthStatus,
)


class AccessLogService(ABC):
    """Public API for the audit trail of access and validation events."""

    @abstractmethod
    def record_access(
        self, *, meta: EnvelopeMeta, event: AccessEvent
    ) -> Envelope[AccessLogEntry]:
        """Record one event; store failures come back as a failed envelope."""

    @abstractmethod
    def list_access_logs(
        self,
        *,
        meta: EnvelopeMeta,
        page: int = 1,
        limit: int | None = None,
        status: str | None = None,
        role: str | None = None,
    ) -> Envelope[AccessLogPage]:
        """Return one page of entries, newest first."""

    @abstractmethod
    def purge_expired(
        self, *, meta: EnvelopeMeta, now: datetime | None = None
    ) -> Envelope[int]:
        """Delete entries past retention; payload is rows deleted."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return access log and backing store readiness."""


def build_access_log_service(
    *,
    settings: PortalSettings,
    substrate: SharedPostgresSubstrate | None = None,
) -> AccessLogService:
    """Build the default Postgres-backed access log from typed settings."""
    from services.state.access_log.config import resolve_access_log_settings
    from services.state.access_log.data import (
        AccessLogPostgresRuntime,
        PostgresAccessLogRepository,
    )
    from services.state.access_log.implementation import DefaultAccessLogService

    runtime = (
        AccessLogPostgresRuntime.from_settings(settings)
        if substrate is None
        else AccessLogPostgresRuntime.from_substrate(substrate)
    )
    return DefaultAccessLogService(
        settings=resolve_access_log_settings(settings),
        repository=PostgresAccessLogRepository(runtime.schema_sessions),
    )
