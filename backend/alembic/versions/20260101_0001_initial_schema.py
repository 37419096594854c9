"""Initial KostMan schema: properties, rooms, readings, bills and payments."""

from __future__ import annotations

from alembic import context, op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "20260101_0001"
down_revision = None
branch_labels = None
depends_on = None


def _dialect_name() -> str:
    bind = op.get_bind()
    if bind is not None:
        return bind.dialect.name
    ctx = context.get_context()
    return ctx.dialect.name if ctx is not None else ""


def upgrade() -> None:
    uuid_type = sa.String(length=36)
    if _dialect_name() == "postgresql":
        uuid_type = postgresql.UUID(as_uuid=True)

    op.create_table(
        "properties",
        sa.Column("property_id", uuid_type, primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "property_settings",
        sa.Column("property_settings_id", uuid_type, primary_key=True),
        sa.Column(
            "property_id",
            uuid_type,
            sa.ForeignKey("properties.property_id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("cost_per_kwh", sa.Numeric(10, 2), nullable=False),
        sa.Column("water_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("trash_fee", sa.Numeric(12, 2), nullable=False),
        sa.CheckConstraint("cost_per_kwh >= 0", name="ck_property_settings_kwh_non_negative"),
        sa.CheckConstraint("water_fee >= 0", name="ck_property_settings_water_non_negative"),
        sa.CheckConstraint("trash_fee >= 0", name="ck_property_settings_trash_non_negative"),
    )

    op.create_table(
        "global_settings",
        sa.Column("global_settings_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("cost_per_kwh", sa.Numeric(10, 2), nullable=False),
        sa.Column("water_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("trash_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "tenants",
        sa.Column("tenant_id", uuid_type, primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("contact", sa.String(length=20), nullable=False),
        sa.Column("id_card_number", sa.String(length=16), nullable=False),
        sa.Column("status", sa.String(length=8), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "rooms",
        sa.Column("room_id", uuid_type, primary_key=True),
        sa.Column(
            "property_id",
            uuid_type,
            sa.ForeignKey("properties.property_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "tenant_id",
            uuid_type,
            sa.ForeignKey("tenants.tenant_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(length=11), nullable=False, server_default="available"),
        sa.Column("use_trash_service", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("occupant_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("move_in_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("property_id", "name", name="rooms_property_name_key"),
        sa.CheckConstraint("price >= 0", name="ck_rooms_price_non_negative"),
        sa.CheckConstraint(
            "occupant_count >= 1 AND occupant_count <= 10",
            name="ck_rooms_occupant_count_range",
        ),
    )
    op.create_index("rooms_property_status_idx", "rooms", ["property_id", "status"])

    op.create_table(
        "meter_readings",
        sa.Column("meter_reading_id", uuid_type, primary_key=True),
        sa.Column(
            "room_id",
            uuid_type,
            sa.ForeignKey("rooms.room_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("period", sa.String(length=7), nullable=False),
        sa.Column("meter_start", sa.Integer(), nullable=False),
        sa.Column("meter_end", sa.Integer(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("recorded_by", sa.String(length=100), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("room_id", "period", name="meter_readings_room_period_key"),
        sa.CheckConstraint("meter_start >= 0", name="ck_meter_readings_start_non_negative"),
        sa.CheckConstraint("meter_end >= meter_start", name="ck_meter_readings_valid_range"),
    )
    op.create_index("ix_meter_readings_room_id", "meter_readings", ["room_id"])

    op.create_table(
        "bills",
        sa.Column("bill_id", uuid_type, primary_key=True),
        sa.Column("billing_code", sa.String(length=32), nullable=False, unique=True),
        sa.Column(
            "room_id",
            uuid_type,
            sa.ForeignKey("rooms.room_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "tenant_id",
            uuid_type,
            sa.ForeignKey("tenants.tenant_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "meter_reading_id",
            uuid_type,
            sa.ForeignKey("meter_readings.meter_reading_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("months_covered", sa.Numeric(6, 2), nullable=False),
        sa.Column("meter_start", sa.Integer(), nullable=False),
        sa.Column("meter_end", sa.Integer(), nullable=False),
        sa.Column("cost_per_kwh", sa.Numeric(10, 2), nullable=False),
        sa.Column("proration_factor", sa.Numeric(7, 4), nullable=False),
        sa.Column("room_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("usage_cost", sa.Numeric(14, 2), nullable=False),
        sa.Column("water_fee", sa.Numeric(14, 2), nullable=False),
        sa.Column("trash_fee", sa.Numeric(14, 2), nullable=False),
        sa.Column("additional_cost", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("total_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("generated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.UniqueConstraint("room_id", "period_start", name="bills_room_period_start_key"),
        sa.CheckConstraint("period_end >= period_start", name="ck_bills_period_range"),
        sa.CheckConstraint("months_covered > 0", name="ck_bills_months_covered_positive"),
        sa.CheckConstraint("meter_end >= meter_start", name="ck_bills_meter_range"),
        sa.CheckConstraint("paid_amount >= 0", name="ck_bills_paid_amount_non_negative"),
    )
    op.create_index("bills_room_period_idx", "bills", ["room_id", "period_start", "period_end"])
    op.create_index("bills_tenant_idx", "bills", ["tenant_id"])
    op.create_index("bills_is_paid_idx", "bills", ["is_paid"])

    op.create_table(
        "bill_charges",
        sa.Column("bill_charge_id", uuid_type, primary_key=True),
        sa.Column(
            "bill_id",
            uuid_type,
            sa.ForeignKey("bills.bill_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("unit_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("discount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("total", sa.Numeric(14, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_bill_charges_quantity_positive"),
        sa.CheckConstraint("unit_price >= 0", name="ck_bill_charges_unit_price_non_negative"),
        sa.CheckConstraint("discount >= 0", name="ck_bill_charges_discount_non_negative"),
    )
    op.create_index("ix_bill_charges_bill_id", "bill_charges", ["bill_id"])

    op.create_table(
        "payments",
        sa.Column("payment_id", uuid_type, primary_key=True),
        sa.Column(
            "bill_id",
            uuid_type,
            sa.ForeignKey("bills.bill_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("method", sa.String(length=8), nullable=False, server_default="cash"),
        sa.Column("paid_on", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recorded_by", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )
    op.create_index("payments_bill_idx", "payments", ["bill_id"])
    op.create_index("payments_paid_on_idx", "payments", ["paid_on"])

    op.create_table(
        "expenses",
        sa.Column("expense_id", uuid_type, primary_key=True),
        sa.Column(
            "property_id",
            uuid_type,
            sa.ForeignKey("properties.property_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("expense_date", sa.Date(), nullable=False),
        sa.Column("created_by", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_expenses_amount_non_negative"),
    )
    op.create_index("expenses_property_date_idx", "expenses", ["property_id", "expense_date"])
    op.create_index("expenses_category_idx", "expenses", ["category"])

    op.create_table(
        "operation_events",
        sa.Column("operation_event_id", uuid_type, primary_key=True),
        sa.Column("operation", sa.String(length=120), nullable=False),
        sa.Column("outcome", sa.String(length=16), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("duration_ms", sa.Numeric(12, 3), nullable=True),
        sa.Column("labels", sa.JSON(), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("recorded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("operation_events_operation_idx", "operation_events", ["operation", "recorded_at"])
    op.create_index("operation_events_outcome_idx", "operation_events", ["outcome"])


def downgrade() -> None:
    op.drop_table("operation_events")
    op.drop_table("expenses")
    op.drop_table("payments")
    op.drop_table("bill_charges")
    op.drop_table("bills")
    op.drop_table("meter_readings")
    op.drop_table("rooms")
    op.drop_table("tenants")
    op.drop_table("global_settings")
    op.drop_table("property_settings")
    op.drop_table("properties")
