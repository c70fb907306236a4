"""create attempt ledger tables"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

from services.state.attempt_ledger.data.runtime import attempt_ledger_schema

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create ledger-owned schema objects."""
    schema = attempt_ledger_schema()

    op.create_table(
        "attempts",
        sa.Column("id", postgresql.BYTEA(), primary_key=True, nullable=False),
        sa.Column("requester_id", sa.String(length=320), nullable=False),
        sa.Column("subject_id", sa.String(length=64), nullable=False),
        sa.Column(
            "consecutive_failures", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("blocked", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("blocked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "last_attempt_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("octet_length(id) = 16", name="ck_id_ulid_16"),
        sa.UniqueConstraint("requester_id", "subject_id", name="uq_attempts_pair"),
        sa.CheckConstraint(
            "consecutive_failures >= 0", name="ck_attempts_failures_nonnegative"
        ),
        sa.CheckConstraint(
            "blocked = (blocked_at IS NOT NULL)",
            name="ck_attempts_blocked_at_matches",
        ),
        schema=schema,
    )
    op.create_index("ix_attempts_blocked", "attempts", ["blocked"], schema=schema)


def downgrade() -> None:
    """Drop ledger-owned schema objects."""
    schema = attempt_ledger_schema()
    op.drop_index("ix_attempts_blocked", table_name="attempts", schema=schema)
    op.drop_table("attempts", schema=schema)
