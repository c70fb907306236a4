"""Behavior tests for Subject Records Service lookup semantics."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from packages.portal_shared.envelope import EnvelopeKind, new_meta
from packages.portal_shared.errors import ErrorCategory, codes
from services.state.subject_records.config import SubjectRecordsSettings
from services.state.subject_records.domain import CanonicalRecord
from services.state.subject_records.implementation import (
    DefaultSubjectRecordsService,
)
from services.state.subject_records.tests.fakes import InMemorySubjectRepository


def _meta() -> object:
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="operator")


def _service() -> tuple[DefaultSubjectRecordsService, InMemorySubjectRepository]:
    repo = InMemorySubjectRepository()
    service = DefaultSubjectRecordsService(
        settings=SubjectRecordsSettings(max_list_limit=10), repository=repo
    )
    return service, repo


def test_lookup_normalizes_subject_id() -> None:
    service, _repo = _service()
    service.upsert_subject(
        meta=_meta(),
        record=CanonicalRecord(
            subject_id="emp006",
            full_name="S Sathish",
            attributes={"designation": "Engineer"},
        ),
    )

    result = service.lookup_subject(meta=_meta(), subject_id="  Emp006 ")

    assert result.ok is True
    assert result.payload is not None
    record = result.payload.value
    assert record is not None
    assert record.subject_id == "EMP006"
    assert record.value_for("name") == "S Sathish"
    assert record.value_for("designation") == "Engineer"
    assert record.value_for("department") is None


def test_lookup_missing_subject_returns_empty_payload() -> None:
    service, _repo = _service()

    result = service.lookup_subject(meta=_meta(), subject_id="EMP404")

    assert result.ok is True
    assert result.payload is not None
    assert result.payload.value is None


def test_lookup_blank_subject_is_invalid() -> None:
    service, _repo = _service()

    result = service.lookup_subject(meta=_meta(), subject_id="   ")

    assert result.ok is False
    assert result.errors[0].code == codes.INVALID_ARGUMENT


def test_lookup_store_failure_is_dependency_error() -> None:
    service, repo = _service()
    repo.raise_on_get = ConnectionError("refused")

    result = service.lookup_subject(meta=_meta(), subject_id="EMP006")

    assert result.ok is False
    assert result.errors[0].category == ErrorCategory.DEPENDENCY


def test_list_subjects_caps_limit_at_configured_maximum() -> None:
    service, repo = _service()

    result = service.list_subjects(meta=_meta(), limit=1000)

    assert result.ok is True
    assert repo.list_limits == [10]


def test_record_rejects_name_attribute() -> None:
    with pytest.raises(ValidationError):
        CanonicalRecord(subject_id="EMP1", full_name="A", attributes={"name": "B"})
