"""Pre-migration provisioning of service-owned schemas."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Connection, text

from packages.portal_shared.component_loader import import_registered_component_modules
from packages.portal_shared.config import PortalSettings
from packages.portal_shared.manifest import ServiceManifest, get_registry

from .config import resolve_postgres_settings
from .engine import create_postgres_engine


@dataclass(frozen=True)
class BootstrapResult:
    """Summary of pre-migration bootstrap actions."""

    imported_components: tuple[str, ...]
    provisioned_schemas: tuple[str, ...]


def bootstrap_service_schemas(*, settings: PortalSettings) -> BootstrapResult:
    """Create one schema for every registered schema-owning service."""
    imported = import_registered_component_modules()
    services = [svc for svc in get_registry().list_services() if svc.owns_schema]
    if not services:
        raise RuntimeError("no schema-owning services registered; refusing bootstrap")

    engine = create_postgres_engine(resolve_postgres_settings(settings))
    try:
        with engine.begin() as connection:
            for service in services:
                _provision_service_schema(connection=connection, service=service)
    finally:
        engine.dispose()

    return BootstrapResult(
        imported_components=imported,
        provisioned_schemas=tuple(svc.schema_name for svc in services),
    )


def _provision_service_schema(*, connection: Connection, service: ServiceManifest) -> None:
    connection.execute(text(f"CREATE SCHEMA IF NOT EXISTS {service.schema_name}"))
