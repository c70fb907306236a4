"""Error shape shared by the portal services, the HTTP layer and the CLI.

An ``ErrorDetail`` never leaks a driver exception: the Postgres substrate
normalizes store failures into one before a service returns it, and the HTTP
layer maps its ``category`` to a status code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class ErrorCategory(str, Enum):
    """Coarse error class; drives the HTTP status and CLI exit code."""

    UNSPECIFIED = "unspecified"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    POLICY = "policy"
    DEPENDENCY = "dependency"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorDetail:
    """One failure reported in an envelope.

    ``metadata`` holds short string context such as the failing ``operation``
    or the offending ``field``. It must never carry submitted subject values.
    """

    code: str
    message: str
    category: ErrorCategory
    retryable: bool = False
    metadata: Mapping[str, str] = field(default_factory=dict)
