"""create booking counter

Revision ID: 5b1c2e9a7f30
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5b1c2e9a7f30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the booking_counter table."""
    op.create_table(
        "booking_counter",
        sa.Column("key", sa.String(length=128), nullable=False),
        sa.Column("daily_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("weekly_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("monthly_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("yearly_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("total_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("last_reset_day", sa.Date(), nullable=False),
        sa.Column("last_reset_week", sa.Date(), nullable=False),
        sa.Column("last_reset_month", sa.Date(), nullable=False),
        sa.Column("last_reset_year", sa.Date(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint(
            "daily_count >= 0 AND weekly_count >= 0 AND monthly_count >= 0 "
            "AND yearly_count >= 0 AND total_count >= 0",
            name="ck_booking_counter_non_negative",
        ),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    """Drop the booking_counter table."""
    op.drop_table("booking_counter")
