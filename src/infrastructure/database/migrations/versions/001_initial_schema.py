"""Initial schema: admins, rate configuration and bill history.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "admins",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(32), nullable=False, server_default="admin"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("username", name="uq_admins_username"),
        sa.UniqueConstraint("email", name="uq_admins_email"),
    )

    op.create_table(
        "rate_entries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("rate_name", sa.String(255), nullable=False),
        sa.Column("rate_type", sa.String(32), nullable=False),
        sa.Column("rate_value", sa.Numeric(10, 4), nullable=False),
        sa.Column("unit_type", sa.String(32), nullable=True),
        sa.Column("consumer_scope", sa.String(32), nullable=False, server_default="all"),
        sa.Column("tier_min_units", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tier_max_units", sa.Integer(), nullable=True),
        sa.Column("vat_percentage", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column(
            "fixed_service_charge", sa.Numeric(10, 2), nullable=False, server_default="0"
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("effective_from", sa.Date(), nullable=True),
        sa.Column("effective_to", sa.Date(), nullable=True),
        sa.Column(
            "created_by",
            sa.Uuid(),
            sa.ForeignKey("admins.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("rate_value >= 0", name="ck_rate_entries_value_non_negative"),
    )
    op.create_index(
        "ix_rate_entries_active_created", "rate_entries", ["is_active", "created_at"]
    )
    op.create_index("ix_rate_entries_consumer_scope", "rate_entries", ["consumer_scope"])

    # Append-only; rows are never updated after insert
    op.create_table(
        "bill_records",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("consumer_name", sa.String(255), nullable=True),
        sa.Column("consumer_id", sa.String(100), nullable=True),
        sa.Column("consumer_type", sa.String(32), nullable=False),
        sa.Column("units_consumed", sa.Numeric(12, 2), nullable=False),
        sa.Column("base_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("surcharge_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("calculation_month", sa.String(7), nullable=False),
        sa.Column("rate_breakdown", sa.Text(), nullable=False),
        sa.Column("applied_rates", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("total_amount >= 0", name="ck_bill_records_total_non_negative"),
    )
    op.create_index("ix_bill_records_created_at", "bill_records", ["created_at"])
    op.create_index("ix_bill_records_consumer_id", "bill_records", ["consumer_id"])
    op.create_index(
        "ix_bill_records_month_type", "bill_records", ["calculation_month", "consumer_type"]
    )


def downgrade() -> None:
    op.drop_table("bill_records")
    op.drop_table("rate_entries")
    op.drop_table("admins")
