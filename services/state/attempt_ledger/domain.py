"""Domain contracts for Attempt Ledger Service payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AttemptState(BaseModel):
    """Failure streak and block state for one (requester, subject) pair."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    requester_id: str
    subject_id: str
    consecutive_failures: int = Field(ge=0)
    blocked: bool
    blocked_at: datetime | None
    last_attempt_at: datetime


class FailureIncrement(BaseModel):
    """Result of one atomic failure increment.

    ``just_blocked`` is true only for the single increment that moved the pair
    from unblocked to blocked.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    state: AttemptState
    just_blocked: bool
    max_attempts: int

    @property
    def remaining_attempts(self) -> int:
        return max(0, self.max_attempts - self.state.consecutive_failures)


class IncrementResult(BaseModel):
    """Public ``increment_failure`` payload.

    ``increment`` is ``None`` when the pair was already blocked and the
    counter was left untouched.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    increment: FailureIncrement | None
    already_blocked: bool


class SuccessResult(BaseModel):
    """Public ``record_success`` payload.

    ``blocked`` is true when the pair was found blocked and left untouched;
    ``state`` is ``None`` then, and also when the pair has no record.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    state: AttemptState | None
    blocked: bool


class HealthStatus(BaseModel):
    """Attempt Ledger and owned dependency readiness status."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    substrate_ready: bool
    detail: str
