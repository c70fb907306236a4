"""Protocol interfaces used by Subject Records Service."""

from __future__ import annotations

from typing import Protocol

from services.state.subject_records.domain import CanonicalRecord


class SubjectRepository(Protocol):
    """Persistence operations over canonical subject records."""

    def get_subject(self, *, subject_id: str) -> CanonicalRecord | None:
        """Read one record by canonical subject id."""

    def upsert_subject(self, *, record: CanonicalRecord) -> CanonicalRecord:
        """Insert or replace one record keyed by subject id."""

    def list_subjects(self, *, limit: int) -> list[CanonicalRecord]:
        """List records ordered by subject id."""

    def ping(self) -> bool:
        """Return whether the backing store answers."""
