"""Domain contracts for Validation Gate decisions."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from services.action.validation_gate.comparator import ComparisonReport


class _Outcome(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Accepted(_Outcome):
    """Every submitted field matched; the pair's failure streak was cleared."""

    kind: Literal["accepted"] = "accepted"
    report: ComparisonReport


class Rejected(_Outcome):
    """Counted failure that left the pair below the block threshold."""

    kind: Literal["rejected"] = "rejected"
    remaining_attempts: int = Field(ge=0)


class JustBlocked(_Outcome):
    """Counted failure that moved the pair into the blocked state."""

    kind: Literal["just_blocked"] = "just_blocked"


class Blocked(_Outcome):
    """Pair was already blocked; nothing was compared or counted."""

    kind: Literal["blocked"] = "blocked"


class InvalidRequest(_Outcome):
    """Malformed input; nothing was compared or counted."""

    kind: Literal["invalid_request"] = "invalid_request"
    reason: str


ValidationOutcome = Annotated[
    Union[Accepted, Rejected, JustBlocked, Blocked, InvalidRequest],
    Field(discriminator="kind"),
]


class HealthStatus(BaseModel):
    """Gate readiness including its service dependencies."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    attempt_ledger_ready: bool
    subject_records_ready: bool
    access_log_ready: bool
    detail: str
