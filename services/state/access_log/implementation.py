"""Concrete Access Log Service implementation."""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta
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
from services.state.access_log.component import SERVICE_COMPONENT_ID
from services.state.access_log.config import AccessLogSettings
from services.state.access_log.domain import (
    AccessEvent,
    AccessLogEntry,
    AccessLogPage,
    HealthStatus,
)
from services.state.access_log.interfaces import AccessLogRepository
from services.state.access_log.service import AccessLogService
from services.state.access_log.validation import ListAccessLogsRequest, PurgeRequest

_LOGGER = get_logger(__name__)
_COMPONENT = str(SERVICE_COMPONENT_ID)


class DefaultAccessLogService(AccessLogService):
    """Access log over one repository."""

    def __init__(
        self, *, settings: AccessLogSettings, repository: AccessLogRepository
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
                detail="ok" if ready else "access log store not ready",
            ),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT)
    def record_access(
        self, *, meta: EnvelopeMeta, event: AccessEvent
    ) -> Envelope[AccessLogEntry]:
        errors = validate_meta(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        try:
            entry = self._repository.insert_entry(event=event)
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="record_access", exc=exc)
        return success(meta=meta, payload=entry)

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT)
    def list_access_logs(
        self,
        *,
        meta: EnvelopeMeta,
        page: int = 1,
        limit: int | None = None,
        status: str | None = None,
        role: str | None = None,
    ) -> Envelope[AccessLogPage]:
        errors = validate_meta(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        try:
            request = ListAccessLogsRequest.model_validate(
                {
                    "page": page,
                    "limit": self._settings.default_page_size if limit is None else limit,
                    "status": status,
                    "role": role,
                }
            )
        except ValidationError as exc:
            return failure(meta=meta, errors=_validation_errors(exc))
        page_limit = min(request.limit, self._settings.max_page_size)
        try:
            entries, total = self._repository.list_entries(
                offset=(request.page - 1) * page_limit,
                limit=page_limit,
                status=request.status,
                role=request.role,
            )
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="list_access_logs", exc=exc)
        return success(
            meta=meta,
            payload=AccessLogPage(
                entries=entries,
                total=total,
                pages=math.ceil(total / page_limit),
                page=request.page,
                limit=page_limit,
            ),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT)
    def purge_expired(
        self, *, meta: EnvelopeMeta, now: datetime | None = None
    ) -> Envelope[int]:
        errors = validate_meta(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        try:
            request = PurgeRequest.model_validate({"now": now})
        except ValidationError as exc:
            return failure(meta=meta, errors=_validation_errors(exc))
        reference = request.now or datetime.now(UTC)
        cutoff = reference - timedelta(days=self._settings.retention_days)
        try:
            count = self._repository.delete_older_than(cutoff=cutoff)
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="purge_expired", exc=exc)
        _LOGGER.info(
            "Purged %d access log entries older than %s", count, cutoff.isoformat()
        )
        return success(meta=meta, payload=count)

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


def _validation_errors(exc: ValidationError) -> list[ErrorDetail]:
    return [
        validation_error(
            f"request validation failed: {err['msg']}",
            code=codes.INVALID_ARGUMENT,
            metadata={"field": ".".join(str(p) for p in err["loc"])},
        )
        for err in exc.errors()
    ]
