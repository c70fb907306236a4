"""Authoritative in-process Python API for Validation Gate Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

from packages.portal_shared.config import PortalSettings
from packages.portal_shared.envelope import Envelope, EnvelopeMeta
from resources.substrates.postgres import SharedPostgresSubstrate
from services.action.validation_gate.domain import HealthStatus, ValidationOutcome


class ValidationGateService(ABC):
    """Public API deciding accept, reject or hard-block for one attempt."""

    @abstractmethod
    def validate(
        self,
        *,
        meta: EnvelopeMeta,
        requester_id: str,
        subject_id: str,
        submitted_fields: Mapping[str, str],
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Envelope[ValidationOutcome]:
        """Validate submitted identity fields for one subject.

        Store failures come back as a failed envelope with no payload.
        """

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return gate readiness across its service dependencies."""


def build_validation_gate_service(
    *,
    settings: PortalSettings,
    substrate: SharedPostgresSubstrate | None = None,
) -> ValidationGateService:
    """Build the default gate over Postgres-backed state services."""
    from resources.substrates.postgres import resolve_postgres_settings
    from services.action.validation_gate.config import (
        resolve_validation_gate_settings,
    )
    from services.action.validation_gate.implementation import (
        DefaultValidationGateService,
    )
    from services.state.access_log.service import build_access_log_service
    from services.state.attempt_ledger.service import build_attempt_ledger_service
    from services.state.subject_records.service import (
        build_subject_records_service,
    )

    shared = (
        SharedPostgresSubstrate(settings=resolve_postgres_settings(settings))
        if substrate is None
        else substrate
    )
    return DefaultValidationGateService(
        settings=resolve_validation_gate_settings(settings),
        attempt_ledger=build_attempt_ledger_service(
            settings=settings, substrate=shared
        ),
        subject_records=build_subject_records_service(
            settings=settings, substrate=shared
        ),
        access_log=build_access_log_service(settings=settings, substrate=shared),
    )
