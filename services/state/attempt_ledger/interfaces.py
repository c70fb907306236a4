"""Protocol interfaces used by Attempt Ledger Service."""

from __future__ import annotations

from typing import Protocol

from services.state.attempt_ledger.domain import AttemptState, FailureIncrement


class AttemptRepository(Protocol):
    """Persistence operations over per-pair attempt state."""

    def get_attempt(self, *, requester_id: str, subject_id: str) -> AttemptState | None:
        """Read one pair's state, or ``None`` when no attempt was ever recorded."""

    def increment_failure(
        self, *, requester_id: str, subject_id: str, max_attempts: int
    ) -> FailureIncrement | None:
        """Atomically count one failure; ``None`` when the pair is already blocked."""

    def clear_streak(
        self, *, requester_id: str, subject_id: str
    ) -> tuple[AttemptState | None, bool]:
        """Zero an unblocked pair's streak; second item is true when blocked."""

    def reset(self, *, requester_id: str, subject_id: str) -> AttemptState | None:
        """Zero the failure streak and unblock one pair."""

    def reset_requester(self, *, requester_id: str) -> int:
        """Reset every pair owned by one requester and return rows touched."""

    def clear_requester(self, *, requester_id: str) -> int:
        """Delete every pair owned by one requester and return rows deleted."""

    def list_attempts(
        self, *, requester_id: str | None, blocked_only: bool, limit: int
    ) -> list[AttemptState]:
        """List pair states, most recently attempted first."""

    def ping(self) -> bool:
        """Return whether the backing store answers."""
