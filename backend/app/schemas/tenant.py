"""Pydantic schemas for tenants."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.tenant import TenantStatus
from .common import PaginatedResponse


class TenantBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact: str = Field(..., min_length=1, max_length=20)
    id_card_number: str = Field(..., min_length=1, max_length=16)
    status: TenantStatus = TenantStatus.ACTIVE


class TenantCreate(TenantBase):
    """Schema used when registering a tenant."""

    pass


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    contact: Optional[str] = Field(default=None, min_length=1, max_length=20)
    id_card_number: Optional[str] = Field(default=None, min_length=1, max_length=16)
    status: Optional[TenantStatus] = None


class TenantRead(TenantBase):
    id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TenantListResponse(PaginatedResponse[TenantRead]):
    """Paginated tenant listing."""

    pass
