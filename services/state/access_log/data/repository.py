"""Postgres repository for access log entries."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Mapping

from sqlalchemy import Select, delete, func, insert, literal, select

from packages.portal_shared.ids import generate_ulid_bytes, ulid_bytes_to_str
from resources.substrates.postgres.schema_session import ServiceSchemaSessionProvider
from services.state.access_log.domain import (
    AccessEvent,
    AccessLogEntry,
    AccessRole,
    AccessStatus,
)
from services.state.access_log.interfaces import AccessLogRepository

from .schema import access_logs


class PostgresAccessLogRepository(AccessLogRepository):
    """SQL repository over access-log-owned schema tables."""

    def __init__(self, sessions: ServiceSchemaSessionProvider) -> None:
        self._sessions = sessions

    def insert_entry(self, *, event: AccessEvent) -> AccessLogEntry:
        stmt = (
            insert(access_logs)
            .values(
                id=generate_ulid_bytes(),
                email=event.email,
                role=event.role.value,
                action=event.action,
                status=event.status.value,
                ip_address=event.ip_address,
                user_agent=event.user_agent,
                failure_reason=event.failure_reason,
                metadata=event.metadata,
            )
            .returning(*access_logs.c)
        )
        with self._sessions.session() as session:
            return _to_entry(session.execute(stmt).mappings().one())

    def list_entries(
        self,
        *,
        offset: int,
        limit: int,
        status: AccessStatus | None,
        role: AccessRole | None,
    ) -> tuple[list[AccessLogEntry], int]:
        rows_stmt = _filtered(select(access_logs), status=status, role=role)
        rows_stmt = (
            rows_stmt.order_by(access_logs.c.timestamp.desc(), access_logs.c.id.desc())
            .offset(offset)
            .limit(limit)
        )
        count_stmt = _filtered(
            select(func.count()).select_from(access_logs), status=status, role=role
        )
        with self._sessions.session() as session:
            total = int(session.execute(count_stmt).scalar_one())
            entries = [_to_entry(row) for row in session.execute(rows_stmt).mappings()]
        return entries, total

    def delete_older_than(self, *, cutoff: datetime) -> int:
        with self._sessions.session() as session:
            result = session.execute(
                delete(access_logs).where(access_logs.c.timestamp < cutoff)
            )
            return int(result.rowcount or 0)

    def ping(self) -> bool:
        with self._sessions.session() as session:
            return session.execute(select(literal(1))).scalar_one() == 1


def _filtered(
    stmt: Select[Any], *, status: AccessStatus | None, role: AccessRole | None
) -> Select[Any]:
    if status is not None:
        stmt = stmt.where(access_logs.c.status == status.value)
    if role is not None:
        stmt = stmt.where(access_logs.c.role == role.value)
    return stmt


def _to_entry(row: Mapping[str, Any]) -> AccessLogEntry:
    timestamp: datetime = row["timestamp"]
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return AccessLogEntry(
        id=ulid_bytes_to_str(bytes(row["id"])),
        email=str(row["email"]),
        role=AccessRole(row["role"]),
        action=str(row["action"]),
        status=AccessStatus(row["status"]),
        ip_address=row.get("ip_address"),
        user_agent=row.get("user_agent"),
        failure_reason=row.get("failure_reason"),
        metadata=dict(row.get("metadata") or {}),
        timestamp=timestamp.astimezone(UTC),
    )
