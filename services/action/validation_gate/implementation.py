"""Concrete Validation Gate Service implementation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from packages.portal_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    success,
    validate_meta,
)
from packages.portal_shared.errors import (
    ErrorDetail,
    codes,
    dependency_error,
    validation_error,
)
from packages.portal_shared.logging import get_logger, public_api_instrumented
from services.action.validation_gate.comparator import compare_fields
from services.action.validation_gate.component import SERVICE_COMPONENT_ID
from services.action.validation_gate.config import ValidationGateSettings
from services.action.validation_gate.domain import (
    Accepted,
    Blocked,
    HealthStatus,
    InvalidRequest,
    JustBlocked,
    Rejected,
    ValidationOutcome,
)
from services.action.validation_gate.service import ValidationGateService
from services.action.validation_gate.validation import ValidateRequest
from services.state.access_log.domain import AccessEvent, AccessRole, AccessStatus
from services.state.access_log.service import AccessLogService
from services.state.attempt_ledger.service import AttemptLedgerService
from services.state.subject_records.service import SubjectRecordsService

_LOGGER = get_logger(__name__)
_COMPONENT = str(SERVICE_COMPONENT_ID)

STORE_UNAVAILABLE_REASON = "store_unavailable"


class _StoreUnavailable(Exception):
    """A dependency call returned a failed envelope."""

    def __init__(self, operation: str, errors: list[ErrorDetail]) -> None:
        super().__init__(operation)
        self.operation = operation
        self.errors = errors


class DefaultValidationGateService(ValidationGateService):
    """Gate composing the attempt ledger, subject records and access log.

    The gate holds no mutable state; concurrent attempts for one pair
    serialize inside the ledger's single-statement increment.
    """

    def __init__(
        self,
        *,
        settings: ValidationGateSettings,
        attempt_ledger: AttemptLedgerService,
        subject_records: SubjectRecordsService,
        access_log: AccessLogService,
    ) -> None:
        self._settings = settings
        self._attempt_ledger = attempt_ledger
        self._subject_records = subject_records
        self._access_log = access_log

    @property
    def settings(self) -> ValidationGateSettings:
        return self._settings

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT)
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        errors = validate_meta(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        ledger = _dependency_ready(self._attempt_ledger.health(meta=meta))
        records = _dependency_ready(self._subject_records.health(meta=meta))
        access_log = _dependency_ready(self._access_log.health(meta=meta))
        not_ready = [
            name
            for name, ready in (
                ("attempt_ledger", ledger),
                ("subject_records", records),
                ("access_log", access_log),
            )
            if not ready
        ]
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=ledger and records,
                attempt_ledger_ready=ledger,
                subject_records_ready=records,
                access_log_ready=access_log,
                detail="ok" if not not_ready else "not ready: " + ", ".join(not_ready),
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT,
        id_fields=("requester_id", "subject_id"),
    )
    def validate(
        self,
        *,
        meta: EnvelopeMeta,
        requester_id: str,
        subject_id: str,
        submitted_fields: Mapping[str, str],
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Envelope[ValidationOutcome]:
        errors = validate_meta(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        request, invalid = self._validate_request(
            requester_id=requester_id,
            subject_id=subject_id,
            submitted_fields=submitted_fields,
        )
        if request is None:
            return failure(
                meta=meta,
                errors=invalid,
                payload=InvalidRequest(reason=invalid[0].message),
            )

        client = {"ip_address": ip_address, "user_agent": user_agent}
        try:
            outcome, score = self._decide(meta=meta, request=request)
        except _StoreUnavailable as exc:
            _LOGGER.warning(
                "Validation failed closed: operation=%s requester_id=%s subject_id=%s",
                exc.operation,
                request.requester_id,
                request.subject_id,
            )
            self._record_attempt(
                meta=meta,
                request=request,
                kind=STORE_UNAVAILABLE_REASON,
                score=None,
                **client,
            )
            return failure(
                meta=meta,
                errors=[
                    dependency_error(
                        "validation store unavailable",
                        code=codes.DEPENDENCY_UNAVAILABLE,
                        metadata={"operation": exc.operation},
                    )
                ],
            )

        self._record_attempt(
            meta=meta, request=request, kind=outcome.kind, score=score, **client
        )
        return success(meta=meta, payload=outcome)

    def _decide(
        self, *, meta: EnvelopeMeta, request: ValidateRequest
    ) -> tuple[ValidationOutcome, float | None]:
        """Run pre-check, lookup, compare and ledger update for one attempt."""
        pair = {"requester_id": request.requester_id, "subject_id": request.subject_id}
        if _require(self._attempt_ledger.is_blocked(meta=meta, **pair), "is_blocked"):
            return Blocked(), None

        record = _require(
            self._subject_records.lookup_subject(
                meta=meta, subject_id=request.subject_id
            ),
            "lookup_subject",
        )
        report = compare_fields(request.submitted_fields, record)

        if report.all_matched:
            cleared = _require(
                self._attempt_ledger.record_success(meta=meta, **pair), "record_success"
            )
            if cleared.blocked:
                return Blocked(), report.score
            return Accepted(report=report), report.score

        result = _require(
            self._attempt_ledger.increment_failure(meta=meta, **pair),
            "increment_failure",
        )
        if result.increment is None:
            return Blocked(), report.score
        if result.increment.just_blocked:
            return JustBlocked(), report.score
        return (
            Rejected(remaining_attempts=result.increment.remaining_attempts),
            report.score,
        )

    def _validate_request(
        self,
        *,
        requester_id: str,
        subject_id: str,
        submitted_fields: Mapping[str, str],
    ) -> tuple[ValidateRequest | None, list[ErrorDetail]]:
        try:
            request = ValidateRequest.model_validate(
                {
                    "requester_id": requester_id,
                    "subject_id": subject_id,
                    "submitted_fields": dict(submitted_fields),
                }
            )
        except ValidationError as exc:
            return None, [
                validation_error(
                    f"request validation failed: {err['msg']}",
                    code=codes.INVALID_ARGUMENT,
                    metadata={"field": ".".join(str(p) for p in err["loc"])},
                )
                for err in exc.errors()
            ]
        missing = request.missing_fields(self._settings.required_fields)
        if missing:
            return None, [
                validation_error(
                    f"{field} is required",
                    code=codes.INVALID_ARGUMENT,
                    metadata={"field": f"submitted_fields.{field}"},
                )
                for field in missing
            ]
        return request, []

    def _record_attempt(
        self,
        *,
        meta: EnvelopeMeta,
        request: ValidateRequest,
        kind: str,
        score: float | None,
        ip_address: str | None,
        user_agent: str | None,
    ) -> None:
        """Write one access log entry; failures never change the outcome."""
        accepted = kind == "accepted"
        metadata: dict[str, Any] = {"subject_id": request.subject_id, "outcome": kind}
        if score is not None:
            metadata["score"] = score
        try:
            result = self._access_log.record_access(
                meta=meta,
                event=AccessEvent(
                    email=request.requester_id,
                    role=AccessRole.VERIFIER,
                    action=self._settings.access_log_action,
                    status=AccessStatus.SUCCESS if accepted else AccessStatus.FAILURE,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    failure_reason=None if accepted else kind,
                    metadata=metadata,
                ),
            )
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning(
                "Access log write raised: exception_type=%s",
                type(exc).__name__,
                exc_info=exc,
            )
            return
        if not result.ok:
            _LOGGER.warning(
                "Access log write failed: code=%s subject_id=%s",
                result.errors[0].code,
                request.subject_id,
            )


def _require(envelope: Envelope[Any], operation: str) -> Any:
    """Return the payload value of a successful envelope or fail closed."""
    if not envelope.ok:
        raise _StoreUnavailable(operation, list(envelope.errors))
    return None if envelope.payload is None else envelope.payload.value


def _dependency_ready(envelope: Envelope[Any]) -> bool:
    if not envelope.ok or envelope.payload is None:
        return False
    return bool(envelope.payload.value.substrate_ready)
