"""Pydantic schemas for rooms."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.room import RoomStatus
from .common import PaginatedResponse
from .tenant import TenantRead


class RoomBase(BaseModel):
    """Attributes shared by create and read operations."""

    property_id: str
    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, description="Monthly base rent")
    tenant_id: Optional[str] = None
    status: RoomStatus = RoomStatus.AVAILABLE
    use_trash_service: bool = True
    occupant_count: int = Field(default=1, ge=1, le=10)
    move_in_date: Optional[date] = None


class RoomCreate(RoomBase):
    """Schema used when creating a room."""

    pass


class RoomUpdate(BaseModel):
    """Schema used when updating a room; unset fields are left untouched."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(default=None, ge=0)
    tenant_id: Optional[str] = None
    status: Optional[RoomStatus] = None
    use_trash_service: Optional[bool] = None
    occupant_count: Optional[int] = Field(default=None, ge=1, le=10)
    move_in_date: Optional[date] = None


class RoomRead(RoomBase):
    id: str
    created_at: datetime
    tenant: Optional[TenantRead] = None

    model_config = ConfigDict(from_attributes=True)


class RoomListResponse(PaginatedResponse[RoomRead]):
    """Paginated room listing."""

    pass
