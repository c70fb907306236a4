"""Behavior tests for Validation Gate decisions and attempt accounting."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from sqlalchemy.exc import OperationalError

from packages.portal_shared.envelope import EnvelopeKind, new_meta
from packages.portal_shared.errors import ErrorCategory, codes
from services.action.validation_gate.config import ValidationGateSettings
from services.action.validation_gate.tests.harness import (
    REQUESTER,
    GateHarness,
    build_harness,
)
from services.state.access_log.domain import AccessStatus


def _meta() -> object:
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal=REQUESTER)


def _validate(
    harness: GateHarness,
    name: str,
    subject_id: str = "EMP006",
    requester_id: str = REQUESTER,
    **fields: str,
):
    return harness.gate.validate(
        meta=_meta(),
        requester_id=requester_id,
        subject_id=subject_id,
        submitted_fields={"name": name, **fields},
    )


def _kind(result) -> str:
    assert result.payload is not None
    return result.payload.value.kind


def test_emp006_scenario_accepts_then_blocks_after_three_failures() -> None:
    harness = build_harness()

    accepted = _validate(harness, "s. sathish")
    first = _validate(harness, "John Doe")
    second = _validate(harness, "John Doe")
    third = _validate(harness, "John Doe")
    fourth = _validate(harness, "S Sathish")

    assert accepted.ok is True
    assert _kind(accepted) == "accepted"
    assert accepted.payload.value.report.score == 1.0
    assert _kind(first) == "rejected"
    assert first.payload.value.remaining_attempts == 2
    assert _kind(second) == "rejected"
    assert second.payload.value.remaining_attempts == 1
    assert _kind(third) == "just_blocked"
    assert _kind(fourth) == "blocked"
    assert harness.attempts.rows[(REQUESTER, "EMP006")].consecutive_failures == 3


def test_blocked_pair_is_not_compared_or_counted() -> None:
    harness = build_harness()
    for _ in range(3):
        _validate(harness, "John Doe")
    calls_before = harness.attempts.increment_calls

    for name in ("John Doe", "S Sathish"):
        assert _kind(_validate(harness, name)) == "blocked"

    assert harness.attempts.increment_calls == calls_before
    assert harness.attempts.rows[(REQUESTER, "EMP006")].consecutive_failures == 3


def test_success_resets_streak_so_next_failure_counts_from_one() -> None:
    harness = build_harness()
    _validate(harness, "John Doe")
    _validate(harness, "John Doe")

    assert _kind(_validate(harness, "S Sathish")) == "accepted"
    after = _validate(harness, "John Doe")

    assert after.payload.value.remaining_attempts == 2
    assert harness.attempts.rows[(REQUESTER, "EMP006")].consecutive_failures == 1


def test_unknown_subject_counts_as_ordinary_failure() -> None:
    harness = build_harness()

    result = _validate(harness, "S Sathish", subject_id="EMP999")

    assert _kind(result) == "rejected"
    assert result.payload.value.remaining_attempts == 2
    assert harness.attempts.rows[(REQUESTER, "EMP999")].consecutive_failures == 1


def test_subject_ids_are_case_insensitive_ledger_keys() -> None:
    harness = build_harness()

    _validate(harness, "John Doe", subject_id=" emp006 ")
    result = _validate(harness, "John Doe", subject_id="EMP006")

    assert result.payload.value.remaining_attempts == 1


def test_pairs_are_independent_per_requester() -> None:
    harness = build_harness()
    for _ in range(3):
        _validate(harness, "John Doe")

    other = _validate(harness, "S Sathish", requester_id="other@example.com")

    assert _kind(other) == "accepted"


def test_any_mismatched_field_is_a_failure() -> None:
    harness = build_harness()

    result = _validate(harness, "S Sathish", designation="Manager")

    assert _kind(result) == "rejected"


def test_missing_required_inputs_are_invalid_without_mutation() -> None:
    harness = build_harness()

    blank_name = _validate(harness, "   ")
    blank_subject = _validate(harness, "S Sathish", subject_id="")
    blank_requester = _validate(harness, "S Sathish", requester_id=" ")

    for result in (blank_name, blank_subject, blank_requester):
        assert result.ok is False
        assert _kind(result) == "invalid_request"
        assert result.errors[0].category == ErrorCategory.VALIDATION
        assert result.errors[0].code == codes.INVALID_ARGUMENT
    assert harness.attempts.rows == {}
    assert harness.access_logs.entries == []


def test_field_names_colliding_after_trim_are_invalid() -> None:
    harness = build_harness()

    result = harness.gate.validate(
        meta=_meta(),
        requester_id=REQUESTER,
        subject_id="EMP006",
        submitted_fields={"name": "John Doe", " name ": "S Sathish"},
    )

    assert result.ok is False
    assert _kind(result) == "invalid_request"
    assert "duplicate submitted field name" in result.payload.value.reason
    assert harness.attempts.rows == {}
    assert harness.access_logs.entries == []


def test_configured_required_fields_are_enforced() -> None:
    harness = build_harness(
        settings=ValidationGateSettings(required_fields=("name", "designation"))
    )

    result = _validate(harness, "S Sathish")

    assert _kind(result) == "invalid_request"
    assert "designation" in result.payload.value.reason


def test_ledger_write_failure_fails_closed() -> None:
    harness = build_harness()
    harness.attempts.raise_on_increment = OperationalError(
        "INSERT", {}, Exception("down")
    )

    result = _validate(harness, "John Doe")

    assert result.ok is False
    assert result.payload is None
    assert result.errors[0].category == ErrorCategory.DEPENDENCY
    assert result.errors[0].code == codes.DEPENDENCY_UNAVAILABLE


def test_ledger_read_failure_fails_closed_before_comparison() -> None:
    harness = build_harness()
    harness.attempts.raise_on_get = OperationalError("SELECT", {}, Exception("down"))

    result = _validate(harness, "S Sathish")

    assert result.ok is False
    assert result.errors[0].code == codes.DEPENDENCY_UNAVAILABLE
    assert harness.attempts.increment_calls == 0


def test_subject_lookup_failure_fails_closed_without_counting() -> None:
    harness = build_harness()
    harness.subjects.raise_on_get = OperationalError("SELECT", {}, Exception("down"))

    result = _validate(harness, "S Sathish")

    assert result.ok is False
    assert result.errors[0].code == codes.DEPENDENCY_UNAVAILABLE
    assert harness.attempts.increment_calls == 0


def test_reset_failure_after_match_fails_closed() -> None:
    harness = build_harness()
    _validate(harness, "John Doe")
    harness.attempts.raise_on_reset = OperationalError("UPDATE", {}, Exception("down"))

    result = _validate(harness, "S Sathish")

    assert result.ok is False
    assert result.errors[0].code == codes.DEPENDENCY_UNAVAILABLE


def test_concurrent_failures_block_exactly_once() -> None:
    harness = build_harness()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: _validate(harness, "John Doe"), range(10)))

    kinds = [_kind(result) for result in results]
    assert kinds.count("just_blocked") == 1
    assert kinds.count("rejected") == 2
    assert kinds.count("blocked") == 7
    assert harness.attempts.rows[(REQUESTER, "EMP006")].consecutive_failures == 3


def test_attempts_are_recorded_to_access_log() -> None:
    harness = build_harness()

    _validate(harness, "S Sathish")
    _validate(harness, "John Doe")

    success, failed = harness.access_logs.entries
    assert success.status is AccessStatus.SUCCESS
    assert success.action == "VALIDATE_SUBJECT"
    assert success.email == REQUESTER
    assert success.metadata == {"subject_id": "EMP006", "outcome": "accepted", "score": 1.0}
    assert failed.status is AccessStatus.FAILURE
    assert failed.failure_reason == "rejected"


def test_access_log_failure_never_changes_outcome() -> None:
    harness = build_harness()
    harness.access_logs.raise_on_insert = OperationalError(
        "INSERT", {}, Exception("down")
    )

    result = _validate(harness, "S Sathish")

    assert result.ok is True
    assert _kind(result) == "accepted"


def test_health_reports_dependency_readiness() -> None:
    harness = build_harness()

    result = harness.gate.health(meta=_meta())

    assert result.payload is not None
    assert result.payload.value.service_ready is True
    assert result.payload.value.detail == "ok"


def test_success_after_stale_pre_check_never_lifts_block() -> None:
    """A match that raced the block transition reports Blocked and keeps it."""
    harness = build_harness()
    for _ in range(3):
        _validate(harness, "John Doe")
    harness.attempts.stale_reads = True

    result = _validate(harness, "S Sathish")

    assert _kind(result) == "blocked"
    state = harness.attempts.rows[(REQUESTER, "EMP006")]
    assert state.blocked is True
    assert state.consecutive_failures == 3
    assert harness.access_logs.entries[-1].failure_reason == "blocked"


def test_concurrent_successes_and_failures_block_at_most_once() -> None:
    harness = build_harness()
    names = ["John Doe"] * 9 + ["S Sathish"] * 3

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda name: _validate(harness, name), names))

    kinds = [_kind(result) for result in results]
    state = harness.attempts.rows[(REQUESTER, "EMP006")]
    assert kinds.count("just_blocked") == (1 if state.blocked else 0)
    assert state.consecutive_failures <= 3
    if state.blocked:
        assert state.consecutive_failures == 3
