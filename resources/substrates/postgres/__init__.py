"""Shared Postgres substrate primitives for portal services."""

from resources.substrates.postgres.component import MANIFEST, RESOURCE_COMPONENT_ID
from resources.substrates.postgres.config import (
    PostgresSettings,
    resolve_postgres_settings,
)
from resources.substrates.postgres.engine import create_postgres_engine
from resources.substrates.postgres.errors import (
    is_postgres_error,
    normalize_postgres_error,
)
from resources.substrates.postgres.health import (
    PostgresHealthStatus,
    check_readiness,
    ping,
)
from resources.substrates.postgres.schema_session import ServiceSchemaSessionProvider
from resources.substrates.postgres.session import (
    create_session_factory,
    transactional_session,
)
from resources.substrates.postgres.substrate import SharedPostgresSubstrate

__all__ = [
    "MANIFEST",
    "RESOURCE_COMPONENT_ID",
    "PostgresHealthStatus",
    "PostgresSettings",
    "ServiceSchemaSessionProvider",
    "SharedPostgresSubstrate",
    "check_readiness",
    "create_postgres_engine",
    "create_session_factory",
    "is_postgres_error",
    "normalize_postgres_error",
    "ping",
    "resolve_postgres_settings",
    "transactional_session",
]
