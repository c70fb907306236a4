"""Protocol interfaces used by Access Log Service."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from services.state.access_log.domain import (
    AccessEvent,
    AccessLogEntry,
    AccessRole,
    AccessStatus,
)


class AccessLogRepository(Protocol):
    """Persistence operations over access log entries."""

    def insert_entry(self, *, event: AccessEvent) -> AccessLogEntry:
        """Persist one event stamped with the store's current time."""

    def list_entries(
        self,
        *,
        offset: int,
        limit: int,
        status: AccessStatus | None,
        role: AccessRole | None,
    ) -> tuple[list[AccessLogEntry], int]:
        """Return one newest-first slice and the total matching count."""

    def delete_older_than(self, *, cutoff: datetime) -> int:
        """Delete entries stamped before ``cutoff`` and return rows deleted."""

    def ping(self) -> bool:
        """Return whether the backing store answers."""
