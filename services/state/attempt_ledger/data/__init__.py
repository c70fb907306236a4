"""Data-layer exports for Attempt Ledger Service."""

from services.state.attempt_ledger.data.repository import (
    PostgresAttemptRepository,
    build_increment_failure_statement,
)
from services.state.attempt_ledger.data.runtime import (
    AttemptLedgerPostgresRuntime,
    attempt_ledger_schema,
)

__all__ = [
    "AttemptLedgerPostgresRuntime",
    "PostgresAttemptRepository",
    "attempt_ledger_schema",
    "build_increment_failure_statement",
]
