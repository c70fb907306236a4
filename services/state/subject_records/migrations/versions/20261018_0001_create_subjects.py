"""create subject records tables"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

from services.state.subject_records.data.runtime import subject_records_schema

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create subject-records-owned schema objects."""
    op.create_table(
        "subjects",
        sa.Column("id", postgresql.BYTEA(), primary_key=True, nullable=False),
        sa.Column("subject_id", sa.String(length=64), nullable=False),
        sa.Column("full_name", sa.String(length=256), nullable=False),
        sa.Column(
            "attributes",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("octet_length(id) = 16", name="ck_id_ulid_16"),
        sa.UniqueConstraint("subject_id", name="uq_subjects_subject_id"),
        schema=subject_records_schema(),
    )


def downgrade() -> None:
    """Drop subject-records-owned schema objects."""
    op.drop_table("subjects", schema=subject_records_schema())
