"""FastAPI and uvicorn helpers shared by the portal HTTP surface."""

from __future__ import annotations

import json
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from packages.portal_shared.envelope import Envelope
from packages.portal_shared.errors import ErrorCategory, ErrorDetail

from .errors import HttpServerError, InvalidJsonBodyError, MissingHeaderError

_CATEGORY_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.POLICY: 403,
    ErrorCategory.DEPENDENCY: 503,
    ErrorCategory.INTERNAL: 500,
    ErrorCategory.UNSPECIFIED: 500,
}


def create_app(*, title: str = "verify-portal", version: str = "0.0.0") -> FastAPI:
    """Create a FastAPI app that renders helper errors with their own status."""
    app = FastAPI(title=title, version=version)

    @app.exception_handler(HttpServerError)
    async def _http_server_error(_: Request, exc: HttpServerError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message, "code": exc.code},
        )

    return app


def run_app(
    app: FastAPI,
    *,
    host: str = "127.0.0.1",
    port: int = 8080,
    log_level: str = "info",
) -> None:
    """Run one FastAPI app through uvicorn."""
    uvicorn.run(app, host=host, port=port, log_level=log_level)


def get_header(
    request: Request,
    name: str,
    *,
    required: bool = True,
) -> str | None:
    """Fetch one stripped header value; blank counts as missing."""
    value = (request.headers.get(name) or "").strip()
    if value:
        return value
    if required:
        raise MissingHeaderError(
            message=f"Missing required header: {name}", header_name=name
        )
    return None


async def read_json_object(request: Request) -> dict[str, Any]:
    """Read the request body as a JSON object."""
    try:
        decoded = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidJsonBodyError(message="Body is not valid JSON") from exc
    if not isinstance(decoded, dict):
        raise InvalidJsonBodyError(message="Body must be a JSON object")
    return decoded


def status_for_errors(errors: list[ErrorDetail]) -> int:
    """Return the HTTP status for the first error of a failed envelope."""
    if not errors:
        return 200
    return _CATEGORY_STATUS.get(errors[0].category, 500)


def envelope_response(envelope: Envelope[Any]) -> JSONResponse:
    """Render a generic envelope as ``{success, data | message}`` JSON."""
    if envelope.ok:
        value = envelope.payload.value if envelope.payload is not None else None
        return JSONResponse(
            status_code=200,
            content={"success": True, "data": jsonable_encoder(value)},
        )
    first = envelope.errors[0]
    return JSONResponse(
        status_code=status_for_errors(envelope.errors),
        content={"success": False, "message": first.message, "code": first.code},
    )
