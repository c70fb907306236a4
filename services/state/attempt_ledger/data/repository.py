"""Authoritative Postgres repository for attempt ledger state."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Mapping

from sqlalchemy import Insert, Update, case, delete, func, literal, select, update
from sqlalchemy.dialects.postgresql import insert

from packages.portal_shared.ids import generate_ulid_bytes
from resources.substrates.postgres.schema_session import ServiceSchemaSessionProvider
from services.state.attempt_ledger.domain import AttemptState, FailureIncrement
from services.state.attempt_ledger.interfaces import AttemptRepository

from .schema import PAIR_CONSTRAINT, attempts


def build_increment_failure_statement(
    *, requester_id: str, subject_id: str, max_attempts: int
) -> Insert:
    """Return the single upsert that counts one failure for a pair.

    The first failure inserts the row; later failures bump the counter in the
    conflict branch. The ``WHERE NOT blocked`` guard leaves blocked rows
    untouched, so ``RETURNING`` yields nothing for them and the counter can
    never pass ``max_attempts``. Concurrent callers serialize on the row lock
    taken by the conflict check.
    """
    next_failures = attempts.c.consecutive_failures + 1
    first_blocks = max_attempts <= 1
    stmt = insert(attempts).values(
        id=generate_ulid_bytes(),
        requester_id=requester_id,
        subject_id=subject_id,
        consecutive_failures=1,
        blocked=first_blocks,
        blocked_at=func.now() if first_blocks else None,
        last_attempt_at=func.now(),
    )
    return stmt.on_conflict_do_update(
        constraint=PAIR_CONSTRAINT,
        set_={
            "consecutive_failures": next_failures,
            "blocked": next_failures >= max_attempts,
            "blocked_at": case(
                (next_failures >= max_attempts, func.now()),
                else_=attempts.c.blocked_at,
            ),
            "last_attempt_at": func.now(),
        },
        where=attempts.c.blocked.is_(False),
    ).returning(*attempts.c)


def build_clear_streak_statement(*, requester_id: str, subject_id: str) -> Update:
    """Return the guarded update that clears one pair's streak on success.

    Blocked rows match nothing, so a success racing the block transition can
    never lift it. Lifting a block is left to the administrative resets.
    """
    return (
        _reset_statement()
        .where(
            attempts.c.requester_id == requester_id,
            attempts.c.subject_id == subject_id,
            attempts.c.blocked.is_(False),
        )
        .returning(*attempts.c)
    )


class PostgresAttemptRepository(AttemptRepository):
    """SQL repository over ledger-owned schema tables."""

    def __init__(self, sessions: ServiceSchemaSessionProvider) -> None:
        self._sessions = sessions

    def get_attempt(self, *, requester_id: str, subject_id: str) -> AttemptState | None:
        with self._sessions.session() as session:
            row = (
                session.execute(
                    select(attempts).where(
                        attempts.c.requester_id == requester_id,
                        attempts.c.subject_id == subject_id,
                    )
                )
                .mappings()
                .one_or_none()
            )
            return None if row is None else _to_state(row)

    def increment_failure(
        self, *, requester_id: str, subject_id: str, max_attempts: int
    ) -> FailureIncrement | None:
        stmt = build_increment_failure_statement(
            requester_id=requester_id,
            subject_id=subject_id,
            max_attempts=max_attempts,
        )
        with self._sessions.session() as session:
            row = session.execute(stmt).mappings().one_or_none()
            if row is None:
                return None
            state = _to_state(row)
            # Only the transition can return a blocked row past the guard.
            return FailureIncrement(
                state=state, just_blocked=state.blocked, max_attempts=max_attempts
            )

    def clear_streak(
        self, *, requester_id: str, subject_id: str
    ) -> tuple[AttemptState | None, bool]:
        stmt = build_clear_streak_statement(
            requester_id=requester_id, subject_id=subject_id
        )
        with self._sessions.session() as session:
            row = session.execute(stmt).mappings().one_or_none()
            if row is not None:
                return _to_state(row), False
            blocked = session.execute(
                select(attempts.c.blocked).where(
                    attempts.c.requester_id == requester_id,
                    attempts.c.subject_id == subject_id,
                )
            ).scalar_one_or_none()
            return None, bool(blocked)

    def reset(self, *, requester_id: str, subject_id: str) -> AttemptState | None:
        with self._sessions.session() as session:
            row = (
                session.execute(
                    _reset_statement()
                    .where(
                        attempts.c.requester_id == requester_id,
                        attempts.c.subject_id == subject_id,
                    )
                    .returning(*attempts.c)
                )
                .mappings()
                .one_or_none()
            )
            return None if row is None else _to_state(row)

    def reset_requester(self, *, requester_id: str) -> int:
        with self._sessions.session() as session:
            result = session.execute(
                _reset_statement().where(attempts.c.requester_id == requester_id)
            )
            return int(result.rowcount or 0)

    def clear_requester(self, *, requester_id: str) -> int:
        with self._sessions.session() as session:
            result = session.execute(
                delete(attempts).where(attempts.c.requester_id == requester_id)
            )
            return int(result.rowcount or 0)

    def list_attempts(
        self, *, requester_id: str | None, blocked_only: bool, limit: int
    ) -> list[AttemptState]:
        stmt = select(attempts)
        if requester_id is not None:
            stmt = stmt.where(attempts.c.requester_id == requester_id)
        if blocked_only:
            stmt = stmt.where(attempts.c.blocked.is_(True))
        stmt = stmt.order_by(attempts.c.last_attempt_at.desc()).limit(limit)
        with self._sessions.session() as session:
            return [_to_state(row) for row in session.execute(stmt).mappings()]

    def ping(self) -> bool:
        with self._sessions.session() as session:
            return session.execute(select(literal(1))).scalar_one() == 1


def _reset_statement() -> Update:
    return update(attempts).values(
        consecutive_failures=0,
        blocked=False,
        blocked_at=None,
        last_attempt_at=func.now(),
    )


def _to_state(row: Mapping[str, Any]) -> AttemptState:
    """Map one SQL row to a strict domain attempt state."""
    blocked_at = row.get("blocked_at")
    return AttemptState(
        requester_id=str(row["requester_id"]),
        subject_id=str(row["subject_id"]),
        consecutive_failures=int(row["consecutive_failures"]),
        blocked=bool(row["blocked"]),
        blocked_at=None if blocked_at is None else _as_utc(blocked_at),
        last_attempt_at=_as_utc(row["last_attempt_at"]),
    )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
