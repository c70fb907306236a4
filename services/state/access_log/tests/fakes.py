"""In-memory access log repository shared by access log and gate tests."""

from __future__ import annotations

from datetime import UTC, datetime
from threading import Lock

from packages.portal_shared.ids import generate_ulid_str
from services.state.access_log.domain import (
    AccessEvent,
    AccessLogEntry,
    AccessRole,
    AccessStatus,
)


class InMemoryAccessLogRepository:
    """Access log repository fake with an injectable clock."""

    def __init__(self) -> None:
        self.entries: list[AccessLogEntry] = []
        self.raise_on_insert: Exception | None = None
        self.clock = lambda: datetime.now(UTC)
        self._lock = Lock()

    def insert_entry(self, *, event: AccessEvent) -> AccessLogEntry:
        if self.raise_on_insert is not None:
            raise self.raise_on_insert
        entry = AccessLogEntry(
            **event.model_dump(), id=generate_ulid_str(), timestamp=self.clock()
        )
        with self._lock:
            self.entries.append(entry)
        return entry

    def list_entries(
        self,
        *,
        offset: int,
        limit: int,
        status: AccessStatus | None,
        role: AccessRole | None,
    ) -> tuple[list[AccessLogEntry], int]:
        matching = [
            entry
            for entry in self.entries
            if (status is None or entry.status == status)
            and (role is None or entry.role == role)
        ]
        matching.sort(key=lambda entry: (entry.timestamp, entry.id), reverse=True)
        return matching[offset : offset + limit], len(matching)

    def delete_older_than(self, *, cutoff: datetime) -> int:
        with self._lock:
            kept = [entry for entry in self.entries if entry.timestamp >= cutoff]
            deleted = len(self.entries) - len(kept)
            self.entries = kept
        return deleted

    def ping(self) -> bool:
        return True
