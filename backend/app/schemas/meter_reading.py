"""Pydantic schemas for meter readings."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common import PaginatedResponse

PERIOD_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class MeterReadingCreate(BaseModel):
    room_id: str
    period: str = Field(..., pattern=PERIOD_PATTERN, description="Month bucket as YYYY-MM")
    meter_start: int = Field(..., ge=0)
    meter_end: int = Field(..., ge=0)
    recorded_by: Optional[str] = None

    @model_validator(mode="after")
    def _check_range(self):
        if self.meter_end < self.meter_start:
            raise ValueError("meter_end must be greater than or equal to meter_start")
        return self


class MeterReadingUpdate(BaseModel):
    """Partial update; the range is validated against the stored values."""

    meter_start: Optional[int] = Field(default=None, ge=0)
    meter_end: Optional[int] = Field(default=None, ge=0)
    recorded_by: Optional[str] = None


class MeterReadingRead(BaseModel):
    id: str
    room_id: str
    period: str
    meter_start: int
    meter_end: int
    consumption: int
    recorded_at: datetime
    recorded_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MeterReadingListResponse(PaginatedResponse[MeterReadingRead]):
    """Paginated meter reading listing."""

    pass
