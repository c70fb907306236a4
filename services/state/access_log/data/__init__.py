"""Data-layer exports for Access Log Service."""

from services.state.access_log.data.repository import PostgresAccessLogRepository
from services.state.access_log.data.runtime import (
    AccessLogPostgresRuntime,
    access_log_schema,
)

__all__ = [
    "AccessLogPostgresRuntime",
    "PostgresAccessLogRepository",
    "access_log_schema",
]
