"""Real-provider integration tests for the subject records repository."""

from __future__ import annotations

import pytest

from services.state.subject_records.data import (
    PostgresSubjectRepository,
    SubjectRecordsPostgresRuntime,
)
from services.state.subject_records.domain import CanonicalRecord
from tests.integration.helpers import real_provider_tests_enabled

pytestmark = pytest.mark.skipif(
    not real_provider_tests_enabled(),
    reason="set VERIFY_PORTAL_RUN_INTEGRATION_REAL=1 to run real-provider integration tests",
)


def test_upsert_replaces_existing_record(migrated_integration_settings) -> None:
    runtime = SubjectRecordsPostgresRuntime.from_settings(migrated_integration_settings)
    repo = PostgresSubjectRepository(runtime.schema_sessions)

    repo.upsert_subject(
        record=CanonicalRecord(subject_id="EMP900", full_name="Old Name")
    )
    repo.upsert_subject(
        record=CanonicalRecord(
            subject_id="EMP900",
            full_name="New Name",
            attributes={"department": "Ops"},
        )
    )

    record = repo.get_subject(subject_id="EMP900")
    assert record is not None
    assert record.full_name == "New Name"
    assert record.attributes == {"department": "Ops"}
