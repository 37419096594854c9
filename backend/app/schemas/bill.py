"""Pydantic schemas for bills, charge lines and bill generation requests."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common import PaginatedResponse
from .meter_reading import PERIOD_PATTERN
from .payment import PaymentRead


class BillChargeCreate(BaseModel):
    """An additional line item such as laundry or a repair."""

    name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(default=1, ge=1)
    unit_price: Decimal = Field(..., ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None


class BillChargeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    quantity: Optional[int] = Field(default=None, ge=1)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    discount: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class BillChargeRead(BaseModel):
    id: str
    bill_id: str
    name: str
    quantity: int
    unit_price: Decimal
    discount: Decimal
    total: Decimal
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class BillGenerateRequest(BaseModel):
    """Input accepted by bill generation and preview.

    The period is either a legacy ``period`` month key (optionally closed by
    ``period_end_month``) or an explicit ``period_start`` date. Rates left
    empty fall back to the property settings and then the global settings;
    meter values left empty are read from the room's meter reading for the
    first month of the period.
    """

    room_id: str
    period: Optional[str] = Field(default=None, pattern=PERIOD_PATTERN)
    period_end_month: Optional[str] = Field(default=None, pattern=PERIOD_PATTERN)
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    months_covered: Optional[Decimal] = Field(default=None, gt=0)
    meter_start: Optional[int] = Field(default=None, ge=0)
    meter_end: Optional[int] = Field(default=None, ge=0)
    cost_per_kwh: Optional[Decimal] = Field(default=None, gt=0)
    water_fee: Optional[Decimal] = Field(default=None, ge=0)
    trash_fee: Optional[Decimal] = Field(default=None, ge=0)
    additional_cost: Decimal = Field(default=Decimal("0"), ge=0)
    charges: list[BillChargeCreate] = Field(default_factory=list)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _require_period(self):
        if self.period is None and self.period_start is None:
            raise ValueError("Either period or period_start is required")
        if (self.meter_start is None) != (self.meter_end is None):
            raise ValueError("meter_start and meter_end must be provided together")
        return self


class BillChargesBreakdown(BaseModel):
    """Computed charges returned by the preview endpoint."""

    room_id: str
    period_start: date
    period_end: date
    months_covered: Decimal
    proration_factor: Decimal
    meter_start: int
    meter_end: int
    cost_per_kwh: Decimal
    room_price: Decimal
    usage_cost: Decimal
    water_fee: Decimal
    trash_fee: Decimal
    additional_cost: Decimal
    total_amount: Decimal


class BillUpdate(BaseModel):
    notes: Optional[str] = None


class BillPeriodUpdate(BaseModel):
    period_start: date
    period_end: date


class BillRead(BaseModel):
    id: str
    billing_code: str
    room_id: str
    tenant_id: Optional[str] = None
    meter_reading_id: Optional[str] = None
    period_start: date
    period_end: date
    months_covered: Decimal
    meter_start: int
    meter_end: int
    cost_per_kwh: Decimal
    proration_factor: Decimal
    room_price: Decimal
    usage_cost: Decimal
    water_fee: Decimal
    trash_fee: Decimal
    additional_cost: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    balance_due: Decimal
    is_paid: bool
    paid_at: Optional[datetime] = None
    generated_at: datetime
    notes: Optional[str] = None
    charges: list[BillChargeRead] = Field(default_factory=list)
    payments: list[PaymentRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class BillListResponse(PaginatedResponse[BillRead]):
    """Paginated bill listing."""

    pass
