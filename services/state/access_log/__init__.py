"""Access Log Service native package exports."""

from services.state.access_log.component import MANIFEST, SERVICE_COMPONENT_ID
from services.state.access_log.config import AccessLogSettings
from services.state.access_log.domain import (
    AccessEvent,
    AccessLogEntry,
    AccessLogPage,
    AccessRole,
    AccessStatus,
    HealthStatus,
)
from services.state.access_log.implementation import DefaultAccessLogService
from services.state.access_log.service import (
    AccessLogService,
    build_access_log_service,
)

__all__ = [
    "MANIFEST",
    "SERVICE_COMPONENT_ID",
    "AccessEvent",
    "AccessLogEntry",
    "AccessLogPage",
    "AccessLogService",
    "AccessLogSettings",
    "AccessRole",
    "AccessStatus",
    "DefaultAccessLogService",
    "HealthStatus",
    "build_access_log_service",
]
