"""Shared HTTP helpers for the portal FastAPI surface."""

from .errors import (
    ForbiddenPrincipalError,
    HttpServerError,
    InvalidJsonBodyError,
    MissingHeaderError,
)
from .server import (
    create_app,
    envelope_response,
    get_header,
    read_json_object,
    run_app,
    status_for_errors,
)

__all__ = [
    "ForbiddenPrincipalError",
    "HttpServerError",
    "InvalidJsonBodyError",
    "MissingHeaderError",
    "create_app",
    "envelope_response",
    "get_header",
    "read_json_object",
    "run_app",
    "status_for_errors",
]
