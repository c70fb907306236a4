"""Behavior tests for Attempt Ledger Service accounting semantics."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from sqlalchemy.exc import OperationalError

from packages.portal_shared.envelope import EnvelopeKind, new_meta
from packages.portal_shared.errors import ErrorCategory, codes
from services.state.attempt_ledger.config import AttemptLedgerSettings
from services.state.attempt_ledger.implementation import DefaultAttemptLedgerService
from services.state.attempt_ledger.tests.fakes import InMemoryAttemptRepository


def _meta() -> object:
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="operator")


def _service(
    max_attempts: int = 3,
) -> tuple[DefaultAttemptLedgerService, InMemoryAttemptRepository]:
    repo = InMemoryAttemptRepository()
    service = DefaultAttemptLedgerService(
        settings=AttemptLedgerSettings(max_attempts=max_attempts), repository=repo
    )
    return service, repo


def _increment(service: DefaultAttemptLedgerService, subject_id: str = "emp006"):
    result = service.increment_failure(
        meta=_meta(), requester_id="verifier@example.com", subject_id=subject_id
    )
    assert result.ok is True
    assert result.payload is not None
    return result.payload.value


def test_increment_counts_up_and_blocks_exactly_once() -> None:
    """Third failure should block the pair and report the transition once."""
    service, _repo = _service()

    first = _increment(service)
    second = _increment(service)
    third = _increment(service)
    fourth = _increment(service)

    assert first.increment is not None
    assert first.increment.state.consecutive_failures == 1
    assert first.increment.remaining_attempts == 2
    assert second.increment is not None
    assert second.increment.just_blocked is False
    assert third.increment is not None
    assert third.increment.just_blocked is True
    assert third.increment.state.blocked_at is not None
    assert fourth.increment is None
    assert fourth.already_blocked is True


def test_subject_ids_are_normalized_before_use_as_keys() -> None:
    service, repo = _service()

    _increment(service, subject_id="  emp006 ")

    assert ("verifier@example.com", "EMP006") in repo.rows
    blocked = service.is_blocked(
        meta=_meta(), requester_id="verifier@example.com", subject_id="EMP006"
    )
    assert blocked.payload is not None
    assert blocked.payload.value is False


def test_reset_clears_streak_and_block() -> None:
    service, _repo = _service()
    for _ in range(3):
        _increment(service)

    reset = service.reset(
        meta=_meta(), requester_id="verifier@example.com", subject_id="EMP006"
    )

    assert reset.ok is True
    assert reset.payload is not None
    state = reset.payload.value
    assert state is not None
    assert (state.consecutive_failures, state.blocked, state.blocked_at) == (
        0,
        False,
        None,
    )
    after = _increment(service)
    assert after.increment is not None
    assert after.increment.state.consecutive_failures == 1


def test_reset_without_prior_failures_is_a_noop() -> None:
    service, repo = _service()

    reset = service.reset(
        meta=_meta(), requester_id="verifier@example.com", subject_id="EMP001"
    )

    assert reset.ok is True
    assert reset.payload is not None
    assert reset.payload.value is None
    assert repo.rows == {}


def test_concurrent_failures_produce_one_block_and_cap_the_counter() -> None:
    """Ten simultaneous failures should yield exactly one blocking increment."""
    service, repo = _service()

    with ThreadPoolExecutor(max_workers=10) as pool:
        results = list(pool.map(lambda _: _increment(service), range(10)))

    just_blocked = [
        item for item in results if item.increment and item.increment.just_blocked
    ]
    already_blocked = [item for item in results if item.already_blocked]
    assert len(just_blocked) == 1
    assert len(already_blocked) == 7
    assert repo.rows[("verifier@example.com", "EMP006")].consecutive_failures == 3


def test_requester_admin_operations_reset_and_delete_all_pairs() -> None:
    service, repo = _service()
    for subject in ("EMP001", "EMP002"):
        for _ in range(3):
            _increment(service, subject_id=subject)

    blocked = service.list_attempts(
        meta=_meta(), requester_id="verifier@example.com", blocked_only=True
    )
    assert blocked.payload is not None
    assert {row.subject_id for row in blocked.payload.value} == {"EMP001", "EMP002"}

    reset = service.reset_requester(meta=_meta(), requester_id="verifier@example.com")
    assert reset.payload is not None
    assert reset.payload.value == 2
    assert all(not row.blocked for row in repo.rows.values())

    cleared = service.clear_requester(
        meta=_meta(), requester_id="verifier@example.com"
    )
    assert cleared.payload is not None
    assert cleared.payload.value == 2
    assert repo.rows == {}


def test_blank_identifiers_are_rejected_without_mutation() -> None:
    service, repo = _service()

    result = service.increment_failure(meta=_meta(), requester_id=" ", subject_id="")

    assert result.ok is False
    assert {error.code for error in result.errors} == {codes.INVALID_ARGUMENT}
    assert repo.increment_calls == 0


def test_store_failures_map_to_dependency_errors() -> None:
    service, repo = _service()
    repo.raise_on_increment = OperationalError("UPDATE", {}, Exception("down"))

    result = service.increment_failure(
        meta=_meta(), requester_id="verifier@example.com", subject_id="EMP006"
    )

    assert result.ok is False
    assert result.payload is None
    assert result.errors[0].category == ErrorCategory.DEPENDENCY
    assert result.errors[0].code == codes.DEPENDENCY_UNAVAILABLE


def test_health_reports_ready_store() -> None:
    service, _repo = _service()

    result = service.health(meta=_meta())

    assert result.ok is True
    assert result.payload is not None
    assert result.payload.value.substrate_ready is True


def test_record_success_clears_unblocked_streak() -> None:
    service, repo = _service()
    _increment(service)
    _increment(service)

    result = service.record_success(
        meta=_meta(), requester_id="verifier@example.com", subject_id="emp006"
    )

    assert result.ok is True
    assert result.payload is not None
    assert result.payload.value.blocked is False
    assert result.payload.value.state is not None
    assert repo.rows[("verifier@example.com", "EMP006")].consecutive_failures == 0


def test_record_success_leaves_blocked_pair_untouched() -> None:
    """Only the administrative resets may lift a block."""
    service, repo = _service()
    for _ in range(3):
        _increment(service)

    result = service.record_success(
        meta=_meta(), requester_id="verifier@example.com", subject_id="EMP006"
    )

    assert result.payload is not None
    assert result.payload.value.blocked is True
    assert result.payload.value.state is None
    state = repo.rows[("verifier@example.com", "EMP006")]
    assert state.blocked is True
    assert state.consecutive_failures == 3


def test_record_success_without_prior_failures_is_a_noop() -> None:
    service, repo = _service()

    result = service.record_success(
        meta=_meta(), requester_id="verifier@example.com", subject_id="EMP006"
    )

    assert result.payload is not None
    assert result.payload.value.state is None
    assert result.payload.value.blocked is False
    assert repo.rows == {}
