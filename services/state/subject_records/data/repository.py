"""Authoritative Postgres repository for canonical subject records."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import func, literal, select
from sqlalchemy.dialects.postgresql import insert

from packages.portal_shared.ids import generate_ulid_bytes
from resources.substrates.postgres.schema_session import ServiceSchemaSessionProvider
from services.state.subject_records.domain import CanonicalRecord
from services.state.subject_records.interfaces import SubjectRepository

from .schema import SUBJECT_ID_CONSTRAINT, subjects


class PostgresSubjectRepository(SubjectRepository):
    """SQL repository over subject-records-owned schema tables."""

    def __init__(self, sessions: ServiceSchemaSessionProvider) -> None:
        self._sessions = sessions

    def get_subject(self, *, subject_id: str) -> CanonicalRecord | None:
        with self._sessions.session() as session:
            row = (
                session.execute(
                    select(subjects).where(subjects.c.subject_id == subject_id)
                )
                .mappings()
                .one_or_none()
            )
            return None if row is None else _to_record(row)

    def upsert_subject(self, *, record: CanonicalRecord) -> CanonicalRecord:
        stmt = insert(subjects).values(
            id=generate_ulid_bytes(),
            subject_id=record.subject_id,
            full_name=record.full_name,
            attributes=dict(record.attributes),
        )
        stmt = stmt.on_conflict_do_update(
            constraint=SUBJECT_ID_CONSTRAINT,
            set_={
                "full_name": stmt.excluded.full_name,
                "attributes": stmt.excluded.attributes,
                "updated_at": func.now(),
            },
        ).returning(*subjects.c)
        with self._sessions.session() as session:
            return _to_record(session.execute(stmt).mappings().one())

    def list_subjects(self, *, limit: int) -> list[CanonicalRecord]:
        stmt = select(subjects).order_by(subjects.c.subject_id).limit(limit)
        with self._sessions.session() as session:
            return [_to_record(row) for row in session.execute(stmt).mappings()]

    def ping(self) -> bool:
        with self._sessions.session() as session:
            return session.execute(select(literal(1))).scalar_one() == 1


def _to_record(row: Mapping[str, Any]) -> CanonicalRecord:
    attributes = row.get("attributes") or {}
    return CanonicalRecord(
        subject_id=str(row["subject_id"]),
        full_name=str(row["full_name"]),
        attributes={str(key): str(value) for key, value in attributes.items()},
    )
