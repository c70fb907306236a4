"""Shared Postgres substrate: one pooled engine per process."""

from __future__ import annotations

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import PostgresSettings
from .engine import create_postgres_engine
from .health import PostgresHealthStatus, check_readiness
from .schema_session import ServiceSchemaSessionProvider
from .session import create_session_factory


class SharedPostgresSubstrate:
    """Own the engine and hand out schema-scoped session providers."""

    def __init__(
        self, *, settings: PostgresSettings, engine: Engine | None = None
    ) -> None:
        self._settings = settings
        self._engine = engine or create_postgres_engine(settings)
        self._session_factory = create_session_factory(self._engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        return self._session_factory

    def schema_sessions(self, schema: str) -> ServiceSchemaSessionProvider:
        """Return a session provider pinned to ``schema``."""
        return ServiceSchemaSessionProvider(
            session_factory=self._session_factory, schema=schema
        )

    def health(self) -> PostgresHealthStatus:
        return check_readiness(
            self._engine, timeout_seconds=self._settings.health_timeout_seconds
        )

    def dispose(self) -> None:
        self._engine.dispose()
