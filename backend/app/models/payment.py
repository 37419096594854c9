"""SQLAlchemy model definitions for bill payments."""

from __future__ import annotations

import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, new_id


class PaymentMethod(str, enum.Enum):
    """Supported payment methods."""

    CASH = "cash"
    TRANSFER = "transfer"
    E_WALLET = "e_wallet"
    OTHER = "other"


PAYMENT_METHOD_ENUM = Enum(
    PaymentMethod,
    name="payment_method_enum",
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    native_enum=False,
    validate_strings=True,
)


class Payment(Base):
    """A (possibly partial) payment recorded against a bill."""

    __tablename__ = "payments"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_payments_amount_positive"),)

    id = Column("payment_id", GUID(), primary_key=True, default=new_id)
    bill_id = Column(
        GUID(),
        ForeignKey("bills.bill_id", ondelete="CASCADE"),
        nullable=False,
    )
    amount = Column(Numeric(14, 2), nullable=False)
    method = Column(PAYMENT_METHOD_ENUM, nullable=False, default=PaymentMethod.CASH)
    paid_on = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    recorded_by = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    bill = relationship("Bill", back_populates="payments")


Index("payments_bill_idx", Payment.bill_id)
Index("payments_paid_on_idx", Payment.paid_on)
