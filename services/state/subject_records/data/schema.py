"""SQLAlchemy table definitions owned by Subject Records Service."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, MetaData, String, Table, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB

from packages.portal_shared.ids import ulid_primary_key_column

metadata = MetaData()

SUBJECT_ID_CONSTRAINT = "uq_subjects_subject_id"

subjects = Table(
    "subjects",
    metadata,
    ulid_primary_key_column("id"),
    Column("subject_id", String(64), nullable=False),
    Column("full_name", String(256), nullable=False),
    Column("attributes", JSONB, nullable=False, server_default="{}"),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
    UniqueConstraint("subject_id", name=SUBJECT_ID_CONSTRAINT),
)
