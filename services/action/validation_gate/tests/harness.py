"""In-memory gate wiring shared by gate service and HTTP tests."""

from __future__ import annotations

from dataclasses import dataclass

from packages.portal_core.main import PortalServices
from services.action.validation_gate.config import ValidationGateSettings
from services.action.validation_gate.implementation import (
    DefaultValidationGateService,
)
from services.state.access_log.config import AccessLogSettings
from services.state.access_log.implementation import DefaultAccessLogService
from services.state.access_log.tests.fakes import InMemoryAccessLogRepository
from services.state.attempt_ledger.config import AttemptLedgerSettings
from services.state.attempt_ledger.implementation import DefaultAttemptLedgerService
from services.state.attempt_ledger.tests.fakes import InMemoryAttemptRepository
from services.state.subject_records.config import SubjectRecordsSettings
from services.state.subject_records.domain import CanonicalRecord
from services.state.subject_records.implementation import (
    DefaultSubjectRecordsService,
)
from services.state.subject_records.tests.fakes import InMemorySubjectRepository

REQUESTER = "verifier@example.com"

EMP006 = CanonicalRecord(
    subject_id="EMP006",
    full_name="S Sathish",
    attributes={"designation": "Software Engineer", "department": "Platform"},
)


@dataclass
class GateHarness:
    gate: DefaultValidationGateService
    ledger: DefaultAttemptLedgerService
    subject_records: DefaultSubjectRecordsService
    access_log: DefaultAccessLogService
    attempts: InMemoryAttemptRepository
    subjects: InMemorySubjectRepository
    access_logs: InMemoryAccessLogRepository


def build_harness(
    *, max_attempts: int = 3, settings: ValidationGateSettings | None = None
) -> GateHarness:
    attempts = InMemoryAttemptRepository()
    subjects = InMemorySubjectRepository(EMP006)
    access_logs = InMemoryAccessLogRepository()
    ledger = DefaultAttemptLedgerService(
        settings=AttemptLedgerSettings(max_attempts=max_attempts), repository=attempts
    )
    access_log = DefaultAccessLogService(
        settings=AccessLogSettings(), repository=access_logs
    )
    subject_records = DefaultSubjectRecordsService(
        settings=SubjectRecordsSettings(), repository=subjects
    )
    gate = DefaultValidationGateService(
        settings=settings or ValidationGateSettings(),
        attempt_ledger=ledger,
        subject_records=subject_records,
        access_log=access_log,
    )
    return GateHarness(
        gate=gate,
        ledger=ledger,
        subject_records=subject_records,
        access_log=access_log,
        attempts=attempts,
        subjects=subjects,
        access_logs=access_logs,
    )


def portal_services(harness: GateHarness) -> PortalServices:
    """Wrap harness services the way the process entrypoint wires them."""
    return PortalServices(
        attempt_ledger=harness.ledger,
        subject_records=harness.subject_records,
        access_log=harness.access_log,
        validation_gate=harness.gate,
    )
