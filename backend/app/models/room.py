"""SQLAlchemy model for rentable rooms."""

from __future__ import annotations

import enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, new_id


class RoomStatus(str, enum.Enum):
    """Occupancy state of a room."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


ROOM_STATUS_ENUM = Enum(
    RoomStatus,
    name="room_status_enum",
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    native_enum=False,
    validate_strings=True,
)


class Room(Base):
    """A room inside a property with its monthly rent and tenancy details."""

    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("property_id", "name", name="rooms_property_name_key"),
        CheckConstraint("price >= 0", name="ck_rooms_price_non_negative"),
        CheckConstraint(
            "occupant_count >= 1 AND occupant_count <= 10",
            name="ck_rooms_occupant_count_range",
        ),
    )

    id = Column("room_id", GUID(), primary_key=True, default=new_id)
    property_id = Column(
        GUID(),
        ForeignKey("properties.property_id", ondelete="RESTRICT"),
        nullable=False,
    )
    tenant_id = Column(
        GUID(),
        ForeignKey("tenants.tenant_id", ondelete="SET NULL"),
        nullable=True,
    )
    name = Column(String(100), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    status = Column(ROOM_STATUS_ENUM, nullable=False, default=RoomStatus.AVAILABLE)
    use_trash_service = Column(Boolean, nullable=False, default=True, server_default="1")
    occupant_count = Column(Integer, nullable=False, default=1, server_default="1")
    move_in_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    property = relationship("Property", back_populates="rooms")
    tenant = relationship("Tenant", back_populates="rooms")
    meter_readings = relationship("MeterReading", back_populates="room")
    bills = relationship("Bill", back_populates="room")


Index("rooms_property_status_idx", Room.property_id, Room.status)
