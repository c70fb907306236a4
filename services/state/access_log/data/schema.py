"""SQLAlchemy table definitions owned by Access Log Service."""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB

from packages.portal_shared.ids import ulid_primary_key_column

metadata = MetaData()

access_logs = Table(
    "access_logs",
    metadata,
    ulid_primary_key_column("id"),
    Column("email", String(320), nullable=False),
    Column("role", String(16), nullable=False, server_default="unknown"),
    Column("action", String(64), nullable=False, server_default="LOGIN"),
    Column("status", String(16), nullable=False),
    Column("ip_address", String(64), nullable=True),
    Column("user_agent", Text, nullable=True),
    Column("failure_reason", Text, nullable=True),
    Column("metadata", JSONB, nullable=False, server_default="{}"),
    Column(
        "timestamp",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
    CheckConstraint(
        "role IN ('admin', 'verifier', 'unknown')", name="ck_access_logs_role"
    ),
    CheckConstraint(
        "status IN ('SUCCESS', 'FAILURE')", name="ck_access_logs_status"
    ),
    Index("ix_access_logs_timestamp", "timestamp"),
    Index("ix_access_logs_email", "email"),
)
