"""Real-provider integration tests for the access log repository."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from services.state.access_log.data import (
    AccessLogPostgresRuntime,
    PostgresAccessLogRepository,
)
from services.state.access_log.domain import AccessEvent, AccessRole, AccessStatus
from tests.integration.helpers import real_provider_tests_enabled

pytestmark = pytest.mark.skipif(
    not real_provider_tests_enabled(),
    reason="set VERIFY_PORTAL_RUN_INTEGRATION_REAL=1 to run real-provider integration tests",
)


@pytest.fixture
def repository(migrated_integration_settings) -> PostgresAccessLogRepository:
    runtime = AccessLogPostgresRuntime.from_settings(migrated_integration_settings)
    repo = PostgresAccessLogRepository(runtime.schema_sessions)
    repo.delete_older_than(cutoff=datetime.now(UTC) + timedelta(days=1))
    return repo


def test_insert_then_list_filters_and_counts(repository) -> None:
    repository.insert_entry(
        event=AccessEvent(
            email="Admin@Example.com",
            status=AccessStatus.SUCCESS,
            role=AccessRole.ADMIN,
            metadata={"path": "/admin"},
        )
    )
    repository.insert_entry(
        event=AccessEvent(
            email="verifier@example.com",
            status=AccessStatus.FAILURE,
            role=AccessRole.VERIFIER,
            action="VALIDATE_SUBJECT",
            failure_reason="mismatch",
        )
    )

    everything, total = repository.list_entries(
        offset=0, limit=10, status=None, role=None
    )
    failures, failure_total = repository.list_entries(
        offset=0, limit=10, status=AccessStatus.FAILURE, role=None
    )

    assert total == 2
    assert everything[0].email == "verifier@example.com"
    assert everything[1].metadata == {"path": "/admin"}
    assert failure_total == 1
    assert failures[0].failure_reason == "mismatch"
