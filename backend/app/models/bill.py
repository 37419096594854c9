"""SQLAlchemy models for room bills and their additional charge lines."""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, new_id


class Bill(Base):
    """Itemized charges for a room over an inclusive billing period."""

    __tablename__ = "bills"
    __table_args__ = (
        UniqueConstraint("room_id", "period_start", name="bills_room_period_start_key"),
        CheckConstraint("period_end >= period_start", name="ck_bills_period_range"),
        CheckConstraint("months_covered > 0", name="ck_bills_months_covered_positive"),
        CheckConstraint("meter_end >= meter_start", name="ck_bills_meter_range"),
        CheckConstraint("paid_amount >= 0", name="ck_bills_paid_amount_non_negative"),
    )

    id = Column("bill_id", GUID(), primary_key=True, default=new_id)
    billing_code = Column(String(32), nullable=False, unique=True)
    room_id = Column(
        GUID(),
        ForeignKey("rooms.room_id", ondelete="RESTRICT"),
        nullable=False,
    )
    tenant_id = Column(
        GUID(),
        ForeignKey("tenants.tenant_id", ondelete="SET NULL"),
        nullable=True,
    )
    meter_reading_id = Column(
        GUID(),
        ForeignKey("meter_readings.meter_reading_id", ondelete="SET NULL"),
        nullable=True,
    )
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    months_covered = Column(Numeric(6, 2), nullable=False, default=1)
    meter_start = Column(Integer, nullable=False)
    meter_end = Column(Integer, nullable=False)
    cost_per_kwh = Column(Numeric(10, 2), nullable=False)
    proration_factor = Column(Numeric(7, 4), nullable=False, default=1)
    room_price = Column(Numeric(14, 2), nullable=False)
    usage_cost = Column(Numeric(14, 2), nullable=False)
    water_fee = Column(Numeric(14, 2), nullable=False)
    trash_fee = Column(Numeric(14, 2), nullable=False)
    additional_cost = Column(Numeric(14, 2), nullable=False, default=0)
    total_amount = Column(Numeric(14, 2), nullable=False)
    paid_amount = Column(Numeric(14, 2), nullable=False, default=0)
    is_paid = Column(Boolean, nullable=False, default=False, server_default="0")
    paid_at = Column(DateTime(timezone=True), nullable=True)
    generated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    notes = Column(Text, nullable=True)

    room = relationship("Room", back_populates="bills")
    tenant = relationship("Tenant")
    meter_reading = relationship("MeterReading", back_populates="bills")
    charges = relationship(
        "BillCharge",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillCharge.created_at",
    )
    payments = relationship(
        "Payment",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="Payment.paid_on",
    )

    @property
    def balance_due(self):
        return (self.total_amount or 0) - (self.paid_amount or 0)


class BillCharge(Base):
    """An additional line item (repairs, laundry, penalties) added to a bill."""

    __tablename__ = "bill_charges"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_bill_charges_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_bill_charges_unit_price_non_negative"),
        CheckConstraint("discount >= 0", name="ck_bill_charges_discount_non_negative"),
    )

    id = Column("bill_charge_id", GUID(), primary_key=True, default=new_id)
    bill_id = Column(
        GUID(),
        ForeignKey("bills.bill_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(14, 2), nullable=False)
    discount = Column(Numeric(14, 2), nullable=False, default=0)
    total = Column(Numeric(14, 2), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    bill = relationship("Bill", back_populates="charges")


Index("bills_room_period_idx", Bill.room_id, Bill.period_start, Bill.period_end)
Index("bills_tenant_idx", Bill.tenant_id)
Index("bills_is_paid_idx", Bill.is_paid)
