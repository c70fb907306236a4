"""Typed errors raised by the inbound HTTP helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from packages.portal_shared.errors import codes


@dataclass(frozen=True)
class HttpServerError(Exception):
    """Base error type for inbound HTTP parsing/validation helpers."""

    status_code: ClassVar[int] = 400
    code: ClassVar[str] = codes.INVALID_ARGUMENT

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class MissingHeaderError(HttpServerError):
    """Required inbound HTTP header is missing or blank."""

    code: ClassVar[str] = codes.MISSING_REQUIRED_FIELD

    header_name: str


@dataclass(frozen=True)
class InvalidJsonBodyError(HttpServerError):
    """Inbound HTTP body is not a JSON object."""


@dataclass(frozen=True)
class ForbiddenPrincipalError(HttpServerError):
    """Caller identity is present but not allowed on this route."""

    status_code: ClassVar[int] = 403
    code: ClassVar[str] = codes.PERMISSION_DENIED

    principal: str
