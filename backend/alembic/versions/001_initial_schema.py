# backend/alembic/versions/001_initial_schema.py
"""Initial schema - positions, users, bookings

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17 00:00:00.000000

Bookings reference positions by code without a foreign key; the admission
engine validates the code on every write.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "positions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("role", sa.String(16), nullable=True),
        sa.Column("division", sa.String(8), nullable=True),
        sa.Column("required_rating", sa.Integer(), nullable=False, server_default="1"),
        sa.CheckConstraint("capacity >= 1", name="ck_positions_capacity_positive"),
    )
    op.create_index("ix_positions_code", "positions", ["code"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("vid", sa.String(32), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rating_level", sa.String(16), nullable=True),
        sa.Column("country_id", sa.String(8), nullable=True),
        sa.Column("division_id", sa.String(8), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_rating_update", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_vid", "users", ["vid"], unique=True)

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("user_vid", sa.String(32), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("position", sa.String(32), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("training_mode", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("exam_mode", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("no_voice", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("booking_type", sa.String(32), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("start_at < end_at", name="ck_bookings_interval_order"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index(
        "idx_bookings_position_time", "bookings", ["position", "start_at", "end_at"]
    )
    op.create_index("idx_bookings_user_future", "bookings", ["user_vid", "end_at"])


def downgrade() -> None:
    op.drop_index("idx_bookings_user_future", table_name="bookings")
    op.drop_index("idx_bookings_position_time", table_name="bookings")
    op.drop_index("ix_bookings_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_users_vid", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_positions_code", table_name="positions")
    op.drop_table("positions")
