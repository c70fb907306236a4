"""SQLAlchemy table definitions owned by Attempt Ledger Service."""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    func,
)

from packages.portal_shared.ids import ulid_primary_key_column

metadata = MetaData()

PAIR_CONSTRAINT = "uq_attempts_pair"

attempts = Table(
    "attempts",
    metadata,
    ulid_primary_key_column("id"),
    Column("requester_id", String(320), nullable=False),
    Column("subject_id", String(64), nullable=False),
    Column("consecutive_failures", Integer, nullable=False, server_default="0"),
    Column("blocked", Boolean, nullable=False, server_default="false"),
    Column("blocked_at", DateTime(timezone=True), nullable=True),
    Column(
        "last_attempt_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
    UniqueConstraint("requester_id", "subject_id", name=PAIR_CONSTRAINT),
    CheckConstraint(
        "consecutive_failures >= 0", name="ck_attempts_failures_nonnegative"
    ),
    CheckConstraint(
        "blocked = (blocked_at IS NOT NULL)", name="ck_attempts_blocked_at_matches"
    ),
    Index("ix_attempts_blocked", "blocked"),
)
