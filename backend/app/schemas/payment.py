"""Pydantic schemas for bill payments."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.payment import PaymentMethod
from .common import PaginatedResponse


class PaymentBase(BaseModel):
    """Shared attributes for payment operations."""

    bill_id: str = Field(..., description="Identifier of the bill receiving the payment")
    amount: Decimal = Field(..., gt=0, description="Amount received")
    method: PaymentMethod = Field(default=PaymentMethod.CASH, description="Payment method used")
    paid_on: Optional[date] = Field(
        default=None, description="Date the money was received, defaults to today"
    )
    notes: Optional[str] = None
    recorded_by: Optional[str] = Field(default=None, description="User who captured the payment")


class PaymentCreate(PaymentBase):
    """Schema used when recording a payment."""

    pass


class PaymentRead(PaymentBase):
    """Schema returned when reading payment data."""

    id: str
    paid_on: date
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentListResponse(PaginatedResponse[PaymentRead]):
    """Paginated payment listing."""

    pass
