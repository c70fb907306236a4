"""Public API for portal startup and migration orchestration."""

from packages.portal_core.migrations import (
    MigrationExecutionError,
    MigrationRunResult,
    discover_service_migration_configs,
    run_startup_migrations,
)

__all__ = [
    "MigrationExecutionError",
    "MigrationRunResult",
    "discover_service_migration_configs",
    "run_startup_migrations",
]
