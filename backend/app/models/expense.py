"""Operating costs of a kost (repairs, utilities, cleaning)."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, new_id


class Expense(Base):
    __tablename__ = "expenses"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_expenses_amount_non_negative"),)

    id = Column("expense_id", GUID(), primary_key=True, default=new_id)
    # Null for costs shared by every property.
    property_id = Column(GUID(), ForeignKey("properties.property_id", ondelete="SET NULL"), nullable=True)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    expense_date = Column(Date, nullable=False)
    created_by = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    property = relationship("Property", back_populates="expenses")


Index("expenses_property_date_idx", Expense.property_id, Expense.expense_date)
Index("expenses_category_idx", Expense.category)
