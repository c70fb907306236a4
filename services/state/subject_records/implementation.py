"""Concrete Subject Records Service implementation."""

from __future__ import annotations

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
from resources.substrates.postgres.errors import (
    is_postgres_error,
    normalize_postgres_error,
)
from services.state.subject_records.component import SERVICE_COMPONENT_ID
from services.state.subject_records.config import SubjectRecordsSettings
from services.state.subject_records.domain import CanonicalRecord, HealthStatus
from services.state.subject_records.interfaces import SubjectRepository
from services.state.subject_records.service import SubjectRecordsService
from services.state.subject_records.validation import (
    ListSubjectsRequest,
    SubjectIdRequest,
)

_LOGGER = get_logger(__name__)
_COMPONENT = str(SERVICE_COMPONENT_ID)


class DefaultSubjectRecordsService(SubjectRecordsService):
    """Subject records over one repository."""

    def __init__(
        self, *, settings: SubjectRecordsSettings, repository: SubjectRepository
    ) -> None:
        self._settings = settings
        self._repository = repository

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
                detail="ok" if ready else "subject store not ready",
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT, id_fields=("subject_id",)
    )
    def lookup_subject(
        self, *, meta: EnvelopeMeta, subject_id: str
    ) -> Envelope[CanonicalRecord | None]:
        errors = validate_meta(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        try:
            request = SubjectIdRequest(subject_id=subject_id)
        except ValidationError as exc:
            return failure(meta=meta, errors=_validation_errors(exc))
        try:
            record = self._repository.get_subject(subject_id=request.subject_id)
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="lookup_subject", exc=exc)
        return success(meta=meta, payload=record)

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT)
    def upsert_subject(
        self, *, meta: EnvelopeMeta, record: CanonicalRecord
    ) -> Envelope[CanonicalRecord]:
        errors = validate_meta(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        try:
            stored = self._repository.upsert_subject(record=record)
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="upsert_subject", exc=exc)
        return success(meta=meta, payload=stored)

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT)
    def list_subjects(
        self, *, meta: EnvelopeMeta, limit: int = 100
    ) -> Envelope[list[CanonicalRecord]]:
        errors = validate_meta(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        try:
            request = ListSubjectsRequest(limit=limit)
        except ValidationError as exc:
            return failure(meta=meta, errors=_validation_errors(exc))
        try:
            records = self._repository.list_subjects(
                limit=min(request.limit, self._settings.max_list_limit)
            )
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="list_subjects", exc=exc)
        return success(meta=meta, payload=records)

    def _store_failure(
        self, *, meta: EnvelopeMeta, operation: str, exc: Exception
    ) -> Envelope[Any]:
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


def _validation_errors(exc: ValidationError) -> list[ErrorDetail]:
    return [
        validation_error(
            f"request validation failed: {err['msg']}",
            code=codes.INVALID_ARGUMENT,
            metadata={"field": ".".join(str(p) for p in err["loc"])},
        )
        for err in exc.errors()
    ]
