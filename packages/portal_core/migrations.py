"""Startup migration orchestration for registered services."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from alembic import command
from alembic.config import Config

from packages.portal_shared.component_loader import import_registered_component_modules
from packages.portal_shared.config import PortalSettings
from packages.portal_shared.logging import get_logger
from packages.portal_shared.manifest import get_registry
from resources.substrates.postgres.bootstrap import bootstrap_service_schemas
from resources.substrates.postgres.config import resolve_postgres_settings

_LOGGER = get_logger(__name__)
_REPO_ROOT = Path(__file__).resolve().parents[2]


class MigrationExecutionError(RuntimeError):
    """Raised when startup migration execution fails."""


@dataclass(frozen=True, slots=True)
class MigrationRunResult:
    """Summary of one startup migration pass."""

    imported_components: tuple[str, ...]
    provisioned_schemas: tuple[str, ...]
    executed_alembic_configs: tuple[str, ...]


def discover_service_migration_configs(
    *, repo_root: Path | None = None
) -> tuple[Path, ...]:
    """Return ``migrations/alembic.ini`` paths for registered services.

    State services come first so action services may depend on their tables.
    """
    root = (repo_root or _REPO_ROOT).resolve()
    import_registered_component_modules()

    config_paths: list[Path] = []
    for service in get_registry().list_services():
        for module_root in sorted(service.module_roots):
            candidate = (
                root / Path(*str(module_root).split(".")) / "migrations" / "alembic.ini"
            )
            if candidate.exists():
                config_paths.append(candidate)
                break
    return tuple(config_paths)


def run_startup_migrations(
    *,
    settings: PortalSettings,
    repo_root: Path | None = None,
    upgrade_fn: Callable[[Config, str], None] = command.upgrade,
) -> MigrationRunResult:
    """Bootstrap schemas and run Alembic upgrades for registered services."""
    bootstrap_result = bootstrap_service_schemas(settings=settings)
    url = resolve_postgres_settings(settings).url
    configs = discover_service_migration_configs(repo_root=repo_root)

    executed: list[str] = []
    for config_path in configs:
        alembic_config = Config(str(config_path))
        alembic_config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
        alembic_config.attributes["skip_logging_config"] = True
        try:
            upgrade_fn(alembic_config, "head")
        except Exception as exc:
            raise MigrationExecutionError(
                f"startup migration failed for config '{config_path}'"
            ) from exc
        _LOGGER.info("Applied migrations: config=%s", config_path)
        executed.append(str(config_path))

    return MigrationRunResult(
        imported_components=bootstrap_result.imported_components,
        provisioned_schemas=bootstrap_result.provisioned_schemas,
        executed_alembic_configs=tuple(executed),
    )
