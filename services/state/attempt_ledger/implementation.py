"""Concrete Attempt Ledger Service implementation."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

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
from resources.substrates.postgres.errors import (
    is_postgres_error,
    normalize_postgres_error,
)
from services.state.attempt_ledger.component import SERVICE_COMPONENT_ID
from services.state.attempt_ledger.config import AttemptLedgerSettings
from services.state.attempt_ledger.domain import (
    AttemptState,
    HealthStatus,
    IncrementResult,
    SuccessResult,
)
from services.state.attempt_ledger.interfaces import AttemptRepository
from services.state.attempt_ledger.service import AttemptLedgerService
from services.state.attempt_ledger.validation import (
    ListAttemptsRequest,
    PairRequest,
    RequesterRequest,
)

_LOGGER = get_logger(__name__)
_COMPONENT = str(SERVICE_COMPONENT_ID)

TRequest = TypeVar("TRequest", bound=BaseModel)


class DefaultAttemptLedgerService(AttemptLedgerService):
    """Ledger over one repository; every mutation is a single statement."""

    def __init__(
        self, *, settings: AttemptLedgerSettings, repository: AttemptRepository
    ) -> None:
        self._settings = settings
        self._repository = repository

    @property
    def max_attempts(self) -> int:
        return self._settings.max_attempts

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT)
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        errors = validate_meta(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        try:
            ready = self._repository.ping()
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="health", exc=exc)
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True,
                substrate_ready=ready,
                detail="ok" if ready else "attempt store not ready",
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT,
        id_fields=("requester_id", "subject_id"),
    )
    def get_attempt(
        self, *, meta: EnvelopeMeta, requester_id: str, subject_id: str
    ) -> Envelope[AttemptState | None]:
        request, errors = self._validate_request(
            meta=meta,
            model=PairRequest,
            payload={"requester_id": requester_id, "subject_id": subject_id},
        )
        if request is None:
            return failure(meta=meta, errors=errors)
        try:
            state = self._repository.get_attempt(
                requester_id=request.requester_id, subject_id=request.subject_id
            )
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="get_attempt", exc=exc)
        return success(meta=meta, payload=state)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT,
        id_fields=("requester_id", "subject_id"),
    )
    def is_blocked(
        self, *, meta: EnvelopeMeta, requester_id: str, subject_id: str
    ) -> Envelope[bool]:
        request, errors = self._validate_request(
            meta=meta,
            model=PairRequest,
            payload={"requester_id": requester_id, "subject_id": subject_id},
        )
        if request is None:
            return failure(meta=meta, errors=errors)
        try:
            state = self._repository.get_attempt(
                requester_id=request.requester_id, subject_id=request.subject_id
            )
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="is_blocked", exc=exc)
        return success(meta=meta, payload=state is not None and state.blocked)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT,
        id_fields=("requester_id", "subject_id"),
    )
    def increment_failure(
        self, *, meta: EnvelopeMeta, requester_id: str, subject_id: str
    ) -> Envelope[IncrementResult]:
        request, errors = self._validate_request(
            meta=meta,
            model=PairRequest,
            payload={"requester_id": requester_id, "subject_id": subject_id},
        )
        if request is None:
            return failure(meta=meta, errors=errors)
        try:
            increment = self._repository.increment_failure(
                requester_id=request.requester_id,
                subject_id=request.subject_id,
                max_attempts=self._settings.max_attempts,
            )
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(
                meta=meta, operation="increment_failure", exc=exc
            )
        if increment is not None and increment.just_blocked:
            _LOGGER.warning(
                "Pair blocked after %d consecutive failures: requester_id=%s subject_id=%s",
                increment.state.consecutive_failures,
                request.requester_id,
                request.subject_id,
            )
        return success(
            meta=meta,
            payload=IncrementResult(
                increment=increment, already_blocked=increment is None
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT,
        id_fields=("requester_id", "subject_id"),
    )
    def record_success(
        self, *, meta: EnvelopeMeta, requester_id: str, subject_id: str
    ) -> Envelope[SuccessResult]:
        request, errors = self._validate_request(
            meta=meta,
            model=PairRequest,
            payload={"requester_id": requester_id, "subject_id": subject_id},
        )
        if request is None:
            return failure(meta=meta, errors=errors)
        try:
            state, blocked = self._repository.clear_streak(
                requester_id=request.requester_id, subject_id=request.subject_id
            )
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="record_success", exc=exc)
        if blocked:
            _LOGGER.warning(
                "Success ignored for blocked pair: requester_id=%s subject_id=%s",
                request.requester_id,
                request.subject_id,
            )
        return success(meta=meta, payload=SuccessResult(state=state, blocked=blocked))

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT,
        id_fields=("requester_id", "subject_id"),
    )
    def reset(
        self, *, meta: EnvelopeMeta, requester_id: str, subject_id: str
    ) -> Envelope[AttemptState | None]:
        request, errors = self._validate_request(
            meta=meta,
            model=PairRequest,
            payload={"requester_id": requester_id, "subject_id": subject_id},
        )
        if request is None:
            return failure(meta=meta, errors=errors)
        try:
            state = self._repository.reset(
                requester_id=request.requester_id, subject_id=request.subject_id
            )
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="reset", exc=exc)
        return success(meta=meta, payload=state)

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT, id_fields=("requester_id",)
    )
    def reset_requester(self, *, meta: EnvelopeMeta, requester_id: str) -> Envelope[int]:
        request, errors = self._validate_request(
            meta=meta, model=RequesterRequest, payload={"requester_id": requester_id}
        )
        if request is None:
            return failure(meta=meta, errors=errors)
        try:
            count = self._repository.reset_requester(requester_id=request.requester_id)
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="reset_requester", exc=exc)
        _LOGGER.info(
            "Reset %d attempt record(s): requester_id=%s", count, request.requester_id
        )
        return success(meta=meta, payload=count)

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT, id_fields=("requester_id",)
    )
    def clear_requester(self, *, meta: EnvelopeMeta, requester_id: str) -> Envelope[int]:
        request, errors = self._validate_request(
            meta=meta, model=RequesterRequest, payload={"requester_id": requester_id}
        )
        if request is None:
            return failure(meta=meta, errors=errors)
        try:
            count = self._repository.clear_requester(requester_id=request.requester_id)
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="clear_requester", exc=exc)
        _LOGGER.info(
            "Deleted %d attempt record(s): requester_id=%s", count, request.requester_id
        )
        return success(meta=meta, payload=count)

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT)
    def list_attempts(
        self,
        *,
        meta: EnvelopeMeta,
        requester_id: str | None = None,
        blocked_only: bool = False,
        limit: int = 100,
    ) -> Envelope[list[AttemptState]]:
        request, errors = self._validate_request(
            meta=meta,
            model=ListAttemptsRequest,
            payload={
                "requester_id": requester_id,
                "blocked_only": blocked_only,
                "limit": limit,
            },
        )
        if request is None:
            return failure(meta=meta, errors=errors)
        try:
            states = self._repository.list_attempts(
                requester_id=request.requester_id,
                blocked_only=request.blocked_only,
                limit=min(request.limit, self._settings.list_limit),
            )
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="list_attempts", exc=exc)
        return success(meta=meta, payload=states)

    def _validate_request(
        self,
        *,
        meta: EnvelopeMeta,
        model: type[TRequest],
        payload: dict[str, Any],
    ) -> tuple[TRequest | None, list[ErrorDetail]]:
        """Validate envelope metadata and request payload model."""
        errors = validate_meta(meta)
        if errors:
            return None, errors
        try:
            return model.model_validate(payload), []
        except ValidationError as exc:
            return None, [
                validation_error(
                    f"request validation failed: {err['msg']}",
                    code=codes.INVALID_ARGUMENT,
                    metadata={"field": ".".join(str(p) for p in err["loc"])},
                )
                for err in exc.errors()
            ]

    def _store_failure(
        self, *, meta: EnvelopeMeta, operation: str, exc: Exception
    ) -> Envelope[Any]:
        """Map one store exception into a failed envelope."""
        _LOGGER.warning(
            "%s failed due to store error: exception_type=%s",
            operation,
            type(exc).__name__,
            exc_info=exc,
        )
        if is_postgres_error(exc):
            return failure(meta=meta, errors=[normalize_postgres_error(exc)])
        return failure(
            meta=meta,
            errors=[
                dependency_error(
                    f"{operation} failed",
                    code=codes.DEPENDENCY_FAILURE,
                    metadata={"exception_type": type(exc).__name__},
                )
            ],
        )
