"""SQLAlchemy model for monthly electricity meter readings."""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, new_id


class MeterReading(Base):
    """Start and end meter values recorded for a room in a YYYY-MM period."""

    __tablename__ = "meter_readings"
    __table_args__ = (
        UniqueConstraint("room_id", "period", name="meter_readings_room_period_key"),
        CheckConstraint("meter_start >= 0", name="ck_meter_readings_start_non_negative"),
        CheckConstraint("meter_end >= meter_start", name="ck_meter_readings_valid_range"),
    )

    id = Column("meter_reading_id", GUID(), primary_key=True, default=new_id)
    room_id = Column(
        GUID(),
        ForeignKey("rooms.room_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    period = Column(String(7), nullable=False)
    meter_start = Column(Integer, nullable=False)
    meter_end = Column(Integer, nullable=False)
    recorded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    recorded_by = Column(String(100), nullable=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    room = relationship("Room", back_populates="meter_readings")
    bills = relationship("Bill", back_populates="meter_reading")

    @property
    def consumption(self) -> int:
        return int(self.meter_end or 0) - int(self.meter_start or 0)
