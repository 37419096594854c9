"""SQLAlchemy model for tenants."""

from __future__ import annotations

import enum

from sqlalchemy import Column, DateTime, Enum, String, func
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, new_id


class TenantStatus(str, enum.Enum):
    """Whether the tenant currently rents a room."""

    ACTIVE = "active"
    INACTIVE = "inactive"


TENANT_STATUS_ENUM = Enum(
    TenantStatus,
    name="tenant_status_enum",
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    native_enum=False,
    validate_strings=True,
)


class Tenant(Base):
    """A person renting one of the rooms."""

    __tablename__ = "tenants"

    id = Column("tenant_id", GUID(), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    contact = Column(String(20), nullable=False)
    id_card_number = Column(String(16), nullable=False)
    status = Column(TENANT_STATUS_ENUM, nullable=False, default=TenantStatus.ACTIVE)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    rooms = relationship("Room", back_populates="tenant")
