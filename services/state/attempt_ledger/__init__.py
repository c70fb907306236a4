"""Attempt Ledger Service native package exports."""

from services.state.attempt_ledger.component import MANIFEST, SERVICE_COMPONENT_ID
from services.state.attempt_ledger.config import AttemptLedgerSettings
from services.state.attempt_ledger.domain import (
    AttemptState,
    FailureIncrement,
    HealthStatus,
    IncrementResult,
    SuccessResult,
)
from services.state.attempt_ledger.implementation import DefaultAttemptLedgerService
from services.state.attempt_ledger.service import (
    AttemptLedgerService,
    build_attempt_ledger_service,
)

__all__ = [
    "MANIFEST",
    "SERVICE_COMPONENT_ID",
    "AttemptLedgerService",
    "AttemptLedgerSettings",
    "AttemptState",
    "DefaultAttemptLedgerService",
    "FailureIncrement",
    "HealthStatus",
    "IncrementResult",
    "SuccessResult",
    "build_attempt_ledger_service",
]
