"""Process entrypoint for the verification portal HTTP runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from packages.portal_core.migrations import run_startup_migrations
from packages.portal_shared.component_loader import import_registered_component_modules
from packages.portal_shared.config import PortalSettings, load_settings
from packages.portal_shared.envelope import EnvelopeKind, new_meta
from packages.portal_shared.http import create_app, run_app
from packages.portal_shared.logging import configure_logging, get_logger
from packages.portal_shared.manifest import get_registry
from resources.substrates.postgres import (
    SharedPostgresSubstrate,
    resolve_postgres_settings,
)
from services.action.validation_gate.api import (
    build_admin_router,
    build_validation_router,
)
from services.action.validation_gate.config import resolve_validation_gate_settings
from services.action.validation_gate.implementation import (
    DefaultValidationGateService,
)
from services.action.validation_gate.service import ValidationGateService
from services.state.access_log.service import (
    AccessLogService,
    build_access_log_service,
)
from services.state.attempt_ledger.service import (
    AttemptLedgerService,
    build_attempt_ledger_service,
)
from services.state.subject_records.service import (
    SubjectRecordsService,
    build_subject_records_service,
)

_LOGGER = get_logger(__name__)

CONFIG_FILE_ENV = "VERIFY_PORTAL_CONFIG_FILE"


@dataclass(frozen=True)
class PortalServices:
    """Service instances sharing one Postgres substrate."""

    attempt_ledger: AttemptLedgerService
    subject_records: SubjectRecordsService
    access_log: AccessLogService
    validation_gate: ValidationGateService
    substrate: SharedPostgresSubstrate | None = None


def build_services(
    *,
    settings: PortalSettings,
    substrate: SharedPostgresSubstrate | None = None,
) -> PortalServices:
    """Build every portal service over one shared substrate."""
    shared = substrate or SharedPostgresSubstrate(
        settings=resolve_postgres_settings(settings)
    )
    attempt_ledger = build_attempt_ledger_service(settings=settings, substrate=shared)
    subject_records = build_subject_records_service(
        settings=settings, substrate=shared
    )
    access_log = build_access_log_service(settings=settings, substrate=shared)
    return PortalServices(
        attempt_ledger=attempt_ledger,
        subject_records=subject_records,
        access_log=access_log,
        validation_gate=DefaultValidationGateService(
            settings=resolve_validation_gate_settings(settings),
            attempt_ledger=attempt_ledger,
            subject_records=subject_records,
            access_log=access_log,
        ),
        substrate=shared,
    )


def build_app(*, settings: PortalSettings, services: PortalServices) -> FastAPI:
    """Create the FastAPI app with validation, admin and health routes."""
    gate_settings = resolve_validation_gate_settings(settings)
    app = create_app(title="Verification Portal API")
    app.include_router(
        build_validation_router(gate=services.validation_gate, settings=gate_settings)
    )
    app.include_router(
        build_admin_router(
            attempt_ledger=services.attempt_ledger,
            access_log=services.access_log,
            settings=gate_settings,
        )
    )

    @app.get("/health")
    def health() -> JSONResponse:
        result = services.validation_gate.health(
            meta=new_meta(kind=EnvelopeKind.COMMAND, source="http", principal="system")
        )
        ready = result.ok and result.payload is not None and (
            result.payload.value.service_ready
        )
        return JSONResponse(
            status_code=200 if ready else 503,
            content={
                "success": ready,
                "data": None
                if result.payload is None
                else jsonable_encoder(result.payload.value),
            },
        )

    return app


def main() -> None:
    """Load settings, migrate, build services and serve HTTP until stopped."""
    config_path = os.getenv(CONFIG_FILE_ENV, "").strip()
    settings = load_settings(config_path=Path(config_path) if config_path else None)
    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
    )

    imported = import_registered_component_modules()
    _LOGGER.info(
        "Component registration completed: imported=%d services=%d",
        len(imported),
        len(get_registry().list_services()),
    )

    if settings.components.core_boot.run_migrations_on_startup:
        migration_result = run_startup_migrations(settings=settings)
        _LOGGER.info(
            "Startup migrations completed: configs=%d",
            len(migration_result.executed_alembic_configs),
        )

    services = build_services(settings=settings)
    app = build_app(settings=settings, services=services)
    _LOGGER.info(
        "Serving portal HTTP API: host=%s port=%d",
        settings.http.host,
        settings.http.port,
    )
    try:
        run_app(
            app,
            host=settings.http.host,
            port=settings.http.port,
            log_level=settings.logging.level.lower(),
        )
    finally:
        if services.substrate is not None:
            services.substrate.dispose()
        _LOGGER.info("Portal HTTP API stopped")


if __name__ == "__main__":
    main()
