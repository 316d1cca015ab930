# alembic/versions/001_booking_core.py
"""Booking core - providers, services and the bookings ledger

Revision ID: 001_booking_core
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the three tables the engine needs. The only concurrency guard is
the partial unique index on bookings(provider_id, start_datetime) limited
to confirmed rows; cancelled rows may share a slot with a confirmed one.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_booking_core"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CONFIRMED_ONLY = sa.text("status = 'confirmed'")


def upgrade() -> None:
    """Create providers, services and bookings."""
    print("Creating booking core tables...")

    op.create_table(
        "providers",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("working_hours", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_providers_id", "providers", ["id"])

    op.create_table(
        "services",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "duration_minutes >= 1 AND duration_minutes <= 480",
            name="ck_services_duration_range",
        ),
    )
    op.create_index("ix_services_id", "services", ["id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("provider_id", sa.String(26), nullable=False),
        sa.Column("service_id", sa.String(26), nullable=False),
        sa.Column("start_datetime", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="confirmed"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        sa.Column("cancelled_by_id", sa.String(64), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["provider_id"], ["providers.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["service_id"], ["services.id"], ondelete="RESTRICT"),
        sa.CheckConstraint("status IN ('confirmed', 'cancelled')", name="ck_bookings_status"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_start_datetime", "bookings", ["start_datetime"])
    op.create_index("ix_bookings_user_start", "bookings", ["user_id", "start_datetime"])

    # One confirmed booking per provider start time
    op.create_index(
        "uq_bookings_provider_start_confirmed",
        "bookings",
        ["provider_id", "start_datetime"],
        unique=True,
        sqlite_where=CONFIRMED_ONLY,
        postgresql_where=CONFIRMED_ONLY,
    )

    print("Booking core tables created")


def downgrade() -> None:
    """Drop the booking core tables."""
    op.drop_index("uq_bookings_provider_start_confirmed", table_name="bookings")
    op.drop_index("ix_bookings_user_start", table_name="bookings")
    op.drop_index("ix_bookings_start_datetime", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_index("ix_bookings_id", table_name="bookings")
    op.drop_table("bookings")

    op.drop_index("ix_services_id", table_name="services")
    op.drop_table("services")

    op.drop_index("ix_providers_id", table_name="providers")
    op.drop_table("providers")
