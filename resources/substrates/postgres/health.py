"""Readiness checks for the Postgres shared substrate."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Engine, text


class PostgresHealthStatus(BaseModel):
    """Postgres readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    detail: str


def ping(engine: Engine, *, timeout_seconds: float = 1.0) -> bool:
    """Return True when the database answers a trivial bounded query."""
    timeout_ms = max(1, int(timeout_seconds * 1000))
    try:
        with engine.connect() as conn:
            conn.execute(
                text("SELECT set_config('statement_timeout', :timeout_value, false)"),
                {"timeout_value": f"{timeout_ms}ms"},
            )
            conn.execute(text("SELECT 1"))
    except Exception:  # noqa: BLE001
        return False
    return True


def check_readiness(
    engine: Engine, *, timeout_seconds: float = 1.0
) -> PostgresHealthStatus:
    ready = ping(engine, timeout_seconds=timeout_seconds)
    return PostgresHealthStatus(
        ready=ready, detail="ok" if ready else "postgres ping failed"
    )
