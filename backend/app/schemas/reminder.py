"""Schemas for the reminder listings (per room and per unpaid bill)."""

from __future__ import annotations

import enum
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ReminderStatus(str, enum.Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    UNPAID = "unpaid"


class DueSoonItem(BaseModel):
    """An occupied room with unpaid bills and the day its rent falls due."""

    room_id: str
    room_name: str
    property_id: str
    property_name: Optional[str] = None
    tenant_id: str
    tenant_name: str
    tenant_contact: str
    due_day: Optional[int] = None
    due_date: Optional[date] = None
    days_until_due: Optional[int] = None
    status: ReminderStatus
    unpaid_bills: int = Field(..., ge=1)
    total_unpaid: Decimal


class DueSoonResponse(BaseModel):
    reference_date: date
    days_ahead: int = Field(..., ge=0)
    overdue: int = 0
    due_soon: int = 0
    unpaid: int = 0
    items: list[DueSoonItem] = Field(default_factory=list)


class BillUrgency(str, enum.Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    UPCOMING = "upcoming"


class UnpaidBillItem(BaseModel):
    bill_id: str
    billing_code: str
    room_id: str
    room_name: str
    property_id: str
    property_name: Optional[str] = None
    tenant_id: Optional[str] = None
    tenant_name: Optional[str] = None
    tenant_contact: Optional[str] = None
    period_start: date
    period_end: date
    total_amount: Decimal
    paid_amount: Decimal
    outstanding: Decimal
    due_date: date
    days_until_due: int
    urgency: BillUrgency


class UnpaidBillsResponse(BaseModel):
    reference_date: date
    days_ahead: int = Field(..., ge=0)
    total: int = 0
    overdue: int = 0
    due_soon: int = 0
    upcoming: int = 0
    items: list[UnpaidBillItem] = Field(default_factory=list)
