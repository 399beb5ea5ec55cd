"""Add the generation_runs audit table and its lookup indexes."""

from typing import Sequence
from typing import Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "002_generation_runs"
down_revision: Union[str, None] = "001_create_enums"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create one audit row per generate call."""
    generation_status_enum = postgresql.ENUM(name="generation_status", create_type=False)

    op.create_table(
        "generation_runs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("business_type", sa.String(length=255), nullable=False),
        sa.Column("schema_type", sa.String(length=32), nullable=False),
        sa.Column("status", generation_status_enum, nullable=False),
        sa.Column("spec_source", sa.String(length=16), nullable=False),
        sa.Column("spec_hash", sa.String(length=64), nullable=True),
        sa.Column("seed", sa.BigInteger(), nullable=False),
        sa.Column("is_preview", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("row_count_requested", sa.Integer(), nullable=False),
        sa.Column("row_count_generated", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("quality_score", sa.Integer(), nullable=True),
        sa.Column("quality", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("tables", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_generation_runs"),
        sa.CheckConstraint(
            "row_count_requested >= 1",
            name="ck_generation_runs_row_count_requested_positive",
        ),
        sa.CheckConstraint(
            "row_count_generated >= 0",
            name="ck_generation_runs_row_count_generated_non_negative",
        ),
        sa.CheckConstraint(
            "spec_source IN ('request', 'cache', 'producer')",
            name="ck_generation_runs_spec_source",
        ),
    )

    op.create_index(
        "ix_generation_runs_created_at",
        "generation_runs",
        [sa.text("created_at DESC")],
        unique=False,
    )
    op.create_index(
        "ix_generation_runs_business_type_created_at",
        "generation_runs",
        ["business_type", sa.text("created_at DESC")],
        unique=False,
    )


def downgrade() -> None:
    """Drop the audit table and its indexes."""
    op.drop_index("ix_generation_runs_business_type_created_at", table_name="generation_runs")
    op.drop_index("ix_generation_runs_created_at", table_name="generation_runs")
    op.drop_table("generation_runs")
