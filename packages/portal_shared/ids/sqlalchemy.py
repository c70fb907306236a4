"""SQLAlchemy helpers for ULID-backed primary keys."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column
from sqlalchemy.dialects.postgresql import BYTEA

from .ulid import ULID_BYTES_LENGTH


def ulid_primary_key_column(name: str = "id") -> Column[bytes]:
    """Return a BYTEA primary key column constrained to exactly 16 bytes."""
    return Column(
        name,
        BYTEA,
        CheckConstraint(
            f"octet_length({name}) = {ULID_BYTES_LENGTH}",
            name=f"ck_{name}_ulid_16",
        ),
        primary_key=True,
        nullable=False,
    )
