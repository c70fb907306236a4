"""Postgres/SQLAlchemy exception normalization."""

from __future__ import annotations

from sqlalchemy import exc as sa_exc

from packages.portal_shared.errors import (
    ErrorDetail,
    codes,
    conflict_error,
    dependency_error,
    internal_error,
)


def normalize_postgres_error(exc: Exception) -> ErrorDetail:
    """Map low-level DB exceptions into shared structured error semantics.

    Connectivity, pool exhaustion and timeouts map to
    ``DEPENDENCY_UNAVAILABLE`` so callers can fail closed on them.
    """
    metadata = {"exception_type": type(exc).__name__}

    if isinstance(exc, sa_exc.IntegrityError) and "duplicate key value" in str(exc):
        return conflict_error(
            "resource already exists", code=codes.ALREADY_EXISTS, metadata=metadata
        )
    if isinstance(
        exc, (sa_exc.OperationalError, sa_exc.TimeoutError, sa_exc.DisconnectionError)
    ) or isinstance(exc, (TimeoutError, ConnectionError)):
        return dependency_error(
            "postgres unavailable",
            code=codes.DEPENDENCY_UNAVAILABLE,
            metadata=metadata,
        )
    if isinstance(exc, (sa_exc.InterfaceError, sa_exc.ProgrammingError)):
        return dependency_error(
            "postgres request failed",
            code=codes.DEPENDENCY_FAILURE,
            retryable=False,
            metadata=metadata,
        )
    return internal_error(
        "unexpected postgres failure",
        code=codes.UNEXPECTED_EXCEPTION,
        metadata=metadata,
    )


def is_postgres_error(exc: Exception) -> bool:
    """Return whether one exception originates from the SQLAlchemy/psycopg stack."""
    module = type(exc).__module__
    return module.startswith("sqlalchemy") or module.startswith("psycopg")
