"""Pydantic schemas for properties and rate settings."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import PaginatedResponse, RateValues


class PropertyBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1)
    description: Optional[str] = None


class PropertyCreate(PropertyBase):
    """Schema used when creating a property."""

    pass


class PropertyUpdate(BaseModel):
    """Schema used when updating a property."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    address: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class PropertySettingsUpdate(RateValues):
    """Rates to store for a single property."""

    pass


class PropertySettingsRead(RateValues):
    id: str
    property_id: str

    model_config = ConfigDict(from_attributes=True)


class PropertyRead(PropertyBase):
    """Schema returned when reading a property."""

    id: str
    created_at: datetime
    updated_at: datetime
    settings: Optional[PropertySettingsRead] = None

    model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(PaginatedResponse[PropertyRead]):
    """Paginated property listing."""

    pass


class GlobalSettingsUpdate(RateValues):
    """Fallback rates applied to properties without their own settings."""

    pass


class GlobalSettingsRead(RateValues):
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
