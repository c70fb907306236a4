"""create access log tables"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

from services.state.access_log.data.runtime import access_log_schema

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create access-log-owned schema objects."""
    schema = access_log_schema()

    op.create_table(
        "access_logs",
        sa.Column("id", postgresql.BYTEA(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column(
            "role", sa.String(length=16), nullable=False, server_default="unknown"
        ),
        sa.Column(
            "action", sa.String(length=64), nullable=False, server_default="LOGIN"
        ),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("failure_reason", sa.Text(), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("octet_length(id) = 16", name="ck_id_ulid_16"),
        sa.CheckConstraint(
            "role IN ('admin', 'verifier', 'unknown')", name="ck_access_logs_role"
        ),
        sa.CheckConstraint(
            "status IN ('SUCCESS', 'FAILURE')", name="ck_access_logs_status"
        ),
        schema=schema,
    )
    op.create_index(
        "ix_access_logs_timestamp", "access_logs", ["timestamp"], schema=schema
    )
    op.create_index("ix_access_logs_email", "access_logs", ["email"], schema=schema)


def downgrade() -> None:
    """Drop access-log-owned schema objects."""
    schema = access_log_schema()
    op.drop_index("ix_access_logs_email", table_name="access_logs", schema=schema)
    op.drop_index("ix_access_logs_timestamp", table_name="access_logs", schema=schema)
    op.drop_table("access_logs", schema=schema)
