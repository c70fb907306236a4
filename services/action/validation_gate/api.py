"""FastAPI routes for the validation gate and its administrative views."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from packages.portal_shared.envelope import Envelope, EnvelopeKind, new_meta
from packages.portal_shared.errors import codes
from packages.portal_shared.http import (
    ForbiddenPrincipalError,
    envelope_response,
    get_header,
    read_json_object,
)
from packages.portal_shared.logging import get_logger
from services.action.validation_gate.config import ValidationGateSettings
from services.action.validation_gate.domain import ValidationOutcome
from services.action.validation_gate.service import ValidationGateService
from services.state.access_log.service import AccessLogService
from services.state.attempt_ledger.service import AttemptLedgerService

_LOGGER = get_logger(__name__)

REQUESTER_HEADER = "X-Requester-Id"
ADMIN_HEADER = "X-Admin-Id"
SUBJECT_BODY_FIELD = "employee_id"
HTTP_SOURCE = "http"

ACCEPTED_MESSAGE = "Employee validated successfully"
REJECTED_MESSAGE = (
    "Employee ID and Name do not match. Please check and try again. "
    "({remaining} {noun} remaining)"
)
ADMIN_REQUIRED_MESSAGE = "Admin access required"

_OUTCOME_STATUS: dict[str, int] = {
    "accepted": 200,
    "rejected": 400,
    "invalid_request": 400,
    "just_blocked": 403,
    "blocked": 403,
}


def build_validation_router(
    *,
    gate: ValidationGateService,
    settings: ValidationGateSettings,
) -> APIRouter:
    """Build the verifier-facing validation route."""
    router = APIRouter()

    @router.post("/api/verify/validate-employee")
    async def validate_employee(request: Request) -> JSONResponse:
        requester_id = get_header(request, REQUESTER_HEADER)
        body = await read_json_object(request)
        subject_id = body.pop(SUBJECT_BODY_FIELD, "")
        result = await run_in_threadpool(
            lambda: gate.validate(
                meta=new_meta(
                    kind=EnvelopeKind.COMMAND,
                    source=HTTP_SOURCE,
                    principal=str(requester_id),
                ),
                requester_id=str(requester_id),
                subject_id=subject_id,
                submitted_fields=body,
                ip_address=None if request.client is None else request.client.host,
                user_agent=request.headers.get("user-agent"),
            )
        )
        return validation_response(result, settings=settings)

    return router


def build_admin_router(
    *,
    attempt_ledger: AttemptLedgerService,
    access_log: AccessLogService,
    settings: ValidationGateSettings,
) -> APIRouter:
    """Build administrative routes over the attempt ledger and access log.

    Every route requires an ``X-Admin-Id`` on the configured allow-list.
    """
    router = APIRouter(prefix="/api/admin")

    @router.get("/verification-attempts")
    def list_verification_attempts(
        request: Request,
        requester: str | None = None,
        blocked_only: bool = False,
        limit: int = 100,
    ) -> JSONResponse:
        result = attempt_ledger.list_attempts(
            meta=_admin_meta(request, settings),
            requester_id=requester,
            blocked_only=blocked_only,
            limit=limit,
        )
        return envelope_response(result)

    @router.post("/verifiers/{requester_id}/unblock")
    def unblock_verifier(
        request: Request,
        requester_id: str,
        delete: bool = False,
        subject: str | None = None,
    ) -> JSONResponse:
        meta = _admin_meta(request, settings)
        if subject is not None and delete:
            return JSONResponse(
                status_code=400,
                content={
                    "success": False,
                    "message": "subject cannot be combined with delete",
                    "code": codes.INVALID_ARGUMENT,
                },
            )
        if subject is not None:
            result = attempt_ledger.reset(
                meta=meta, requester_id=requester_id, subject_id=subject
            )
        elif delete:
            result = attempt_ledger.clear_requester(
                meta=meta, requester_id=requester_id
            )
        else:
            result = attempt_ledger.reset_requester(
                meta=meta, requester_id=requester_id
            )
        if not result.ok or result.payload is None:
            return envelope_response(result)
        return JSONResponse(
            status_code=200,
            content={
                "success": True,
                "data": {
                    "requester_id": requester_id.strip(),
                    "records": _records_touched(result.payload.value),
                    "mode": "deleted" if delete else "reset",
                },
            },
        )

    @router.get("/access-logs")
    def list_access_logs(
        request: Request,
        page: int = 1,
        limit: int | None = None,
        status: str | None = None,
        role: str | None = None,
    ) -> JSONResponse:
        result = access_log.list_access_logs(
            meta=_admin_meta(request, settings),
            page=page,
            limit=limit,
            status=status,
            role=role,
        )
        if not result.ok or result.payload is None:
            return envelope_response(result)
        page_value = result.payload.value
        return JSONResponse(
            status_code=200,
            content={
                "success": True,
                "data": {
                    "logs": jsonable_encoder(page_value.entries),
                    "pagination": {
                        "total": page_value.total,
                        "pages": page_value.pages,
                        "page": page_value.page,
                        "limit": page_value.limit,
                    },
                },
            },
        )

    return router


def validation_response(
    envelope: Envelope[ValidationOutcome], *, settings: ValidationGateSettings
) -> JSONResponse:
    """Render one gate envelope with the portal's status and message rules."""
    if envelope.payload is None:
        return envelope_response(envelope)
    outcome = envelope.payload.value
    status_code = _OUTCOME_STATUS[outcome.kind]
    content: dict[str, Any] = {"success": outcome.kind == "accepted"}
    if outcome.kind == "accepted":
        content["message"] = ACCEPTED_MESSAGE
        content["data"] = jsonable_encoder(outcome.report)
    elif outcome.kind == "rejected":
        remaining = outcome.remaining_attempts
        content["message"] = REJECTED_MESSAGE.format(
            remaining=remaining, noun="attempt" if remaining == 1 else "attempts"
        )
        content["remaining_attempts"] = outcome.remaining_attempts
    elif outcome.kind in ("just_blocked", "blocked"):
        content["message"] = settings.render_blocked_message()
        content["blocked"] = True
    else:
        content["message"] = outcome.reason
    return JSONResponse(status_code=status_code, content=content)


def _admin_meta(request: Request, settings: ValidationGateSettings):
    admin_id = str(get_header(request, ADMIN_HEADER))
    if not settings.is_admin(admin_id):
        _LOGGER.warning(
            "Admin route denied: principal=%s path=%s", admin_id, request.url.path
        )
        raise ForbiddenPrincipalError(message=ADMIN_REQUIRED_MESSAGE, principal=admin_id)
    return new_meta(kind=EnvelopeKind.COMMAND, source=HTTP_SOURCE, principal=admin_id)


def _records_touched(value: Any) -> int:
    """Count rows from a requester-wide count or a single-pair reset."""
    if isinstance(value, int):
        return value
    return 0 if value is None else 1
