"""Initial schema: users, provider profiles and menus, vehicles, bookings, invoices

Revision ID: 001
Revises:
Create Date: 2026-10-16 00:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid() -> postgresql.UUID:
    return postgresql.UUID(as_uuid=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("district", sa.String(100), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("reset_token_hash", sa.String(64), nullable=True),
        sa.Column("reset_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("password_changed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_reset_token_hash", "users", ["reset_token_hash"])

    op.create_table(
        "provider_profiles",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("business_name", sa.String(150), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("street_address", sa.String(255), nullable=False, server_default=""),
        sa.Column("district", sa.String(100), nullable=False, server_default=""),
        sa.Column("city", sa.String(100), nullable=False, server_default=""),
        sa.Column("business_description", sa.Text(), nullable=True),
        sa.Column("registration_number", sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_provider_profiles_category", "provider_profiles", ["category"])

    op.create_table(
        "provider_services",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column(
            "profile_id", _uuid(), sa.ForeignKey("provider_profiles.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="ck_provider_service_price_positive"),
    )
    op.create_index("ix_provider_services_profile_id", "provider_services", ["profile_id"])

    op.create_table(
        "vehicles",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("owner_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("make", sa.String(100), nullable=False),
        sa.Column("model", sa.String(100), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("license_plate", sa.String(20), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_vehicles_owner_id", "vehicles", ["owner_id"])
    op.create_index("ix_vehicle_owner_created", "vehicles", ["owner_id", "created_at"])

    op.create_table(
        "bookings",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("vehicle_id", _uuid(), sa.ForeignKey("vehicles.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("provider_id", _uuid(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("service_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        *_timestamps(),
    )
    op.create_index("ix_bookings_vehicle_id", "bookings", ["vehicle_id"])
    op.create_index("ix_bookings_provider_id", "bookings", ["provider_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_booking_provider_created", "bookings", ["provider_id", "created_at"])
    op.create_index("ix_booking_vehicle_created", "bookings", ["vehicle_id", "created_at"])

    op.create_table(
        "invoices",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column(
            "booking_id", _uuid(), sa.ForeignKey("bookings.id", ondelete="RESTRICT"), nullable=False, unique=True
        ),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="UNPAID"),
        sa.Column("items", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("amount >= 0", name="ck_invoice_amount_positive"),
    )


def downgrade() -> None:
    op.drop_table("invoices")
    op.drop_table("bookings")
    op.drop_table("vehicles")
    op.drop_table("provider_services")
    op.drop_table("provider_profiles")
    op.drop_table("users")
