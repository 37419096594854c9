"""Shared schema definitions."""

from __future__ import annotations

from decimal import Decimal
from typing import Generic, Sequence, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Standard shape for paginated listings."""

    items: Sequence[T]
    total: int = Field(..., ge=0, description="Number of rows matching the filters")
    limit: int = Field(..., ge=1)
    skip: int = Field(..., ge=0)


class RateValues(BaseModel):
    """Utility rates shared by property and global settings."""

    cost_per_kwh: Decimal = Field(..., gt=0, description="Electricity price per kWh")
    water_fee: Decimal = Field(..., ge=0, description="Monthly water fee per occupant")
    trash_fee: Decimal = Field(..., ge=0, description="Monthly trash collection fee")
