from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import PaginatedResponse


def _clean_category(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("category must not be blank")
    return stripped


class ExpenseBase(BaseModel):
    property_id: Optional[str] = Field(default=None, description="Kost the cost belongs to; empty for shared costs")
    expense_date: date
    category: str = Field(..., min_length=1, max_length=100, examples=["Maintenance", "Electricity"])
    description: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0, decimal_places=2)

    @field_validator("category")
    @classmethod
    def _strip_category(cls, value: str) -> str:
        return _clean_category(value)


class ExpenseCreate(ExpenseBase):
    created_by: Optional[str] = Field(default=None, max_length=100)


class ExpenseRead(ExpenseBase):
    id: str
    created_by: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExpenseListResponse(PaginatedResponse[ExpenseRead]):
    pass


class ExpenseUpdate(BaseModel):
    """Partial update; omitted fields keep their stored values."""

    property_id: Optional[str] = None
    expense_date: Optional[date] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)

    @field_validator("category")
    @classmethod
    def _strip_category(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _clean_category(value)

    @field_validator("expense_date", "category", "description", "amount")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("field cannot be null")
        return value
