"""Real-provider integration tests for the attempt ledger repository."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from services.state.attempt_ledger.data import (
    AttemptLedgerPostgresRuntime,
    PostgresAttemptRepository,
)
from tests.integration.helpers import real_provider_tests_enabled

pytestmark = pytest.mark.skipif(
    not real_provider_tests_enabled(),
    reason="set VERIFY_PORTAL_RUN_INTEGRATION_REAL=1 to run real-provider integration tests",
)


@pytest.fixture
def repository(migrated_integration_settings) -> PostgresAttemptRepository:
    runtime = AttemptLedgerPostgresRuntime.from_settings(migrated_integration_settings)
    repo = PostgresAttemptRepository(runtime.schema_sessions)
    repo.clear_requester(requester_id="verifier@example.com")
    return repo


def test_increment_blocks_at_max_and_reset_unblocks(repository) -> None:
    results = [
        repository.increment_failure(
            requester_id="verifier@example.com", subject_id="EMP006", max_attempts=3
        )
        for _ in range(4)
    ]

    assert [item.state.consecutive_failures for item in results[:3]] == [1, 2, 3]
    assert [item.just_blocked for item in results[:3]] == [False, False, True]
    assert results[3] is None

    state = repository.reset(requester_id="verifier@example.com", subject_id="EMP006")
    assert state is not None
    assert state.consecutive_failures == 0
    assert state.blocked is False


def test_concurrent_increments_block_exactly_once(repository) -> None:
    def _attempt(_: int):
        return repository.increment_failure(
            requester_id="verifier@example.com", subject_id="EMP007", max_attempts=3
        )

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(_attempt, range(12)))

    assert sum(1 for item in results if item is not None and item.just_blocked) == 1
    assert sum(1 for item in results if item is None) == 9
    final = repository.get_attempt(
        requester_id="verifier@example.com", subject_id="EMP007"
    )
    assert final is not None
    assert final.consecutive_failures == 3
