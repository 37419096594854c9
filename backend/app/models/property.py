"""SQLAlchemy models for properties and the utility rates applied to their rooms."""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, new_id


class Property(Base):
    """A boarding house (kost) owning a set of rooms."""

    __tablename__ = "properties"

    id = Column("property_id", GUID(), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    address = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    settings = relationship(
        "PropertySettings",
        back_populates="property",
        uselist=False,
        cascade="all, delete-orphan",
    )
    rooms = relationship("Room", back_populates="property")
    expenses = relationship("Expense", back_populates="property")


class PropertySettings(Base):
    """Per-property utility rates used when generating bills."""

    __tablename__ = "property_settings"
    __table_args__ = (
        CheckConstraint("cost_per_kwh >= 0", name="ck_property_settings_kwh_non_negative"),
        CheckConstraint("water_fee >= 0", name="ck_property_settings_water_non_negative"),
        CheckConstraint("trash_fee >= 0", name="ck_property_settings_trash_non_negative"),
    )

    id = Column("property_settings_id", GUID(), primary_key=True, default=new_id)
    property_id = Column(
        GUID(),
        ForeignKey("properties.property_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    cost_per_kwh = Column(Numeric(10, 2), nullable=False)
    water_fee = Column(Numeric(12, 2), nullable=False)
    trash_fee = Column(Numeric(12, 2), nullable=False)

    property = relationship("Property", back_populates="settings")


class GlobalSettings(Base):
    """Fallback rates used when a property has no settings of its own."""

    __tablename__ = "global_settings"

    id = Column("global_settings_id", Integer, primary_key=True, autoincrement=True)
    cost_per_kwh = Column(Numeric(10, 2), nullable=False, default=1500)
    water_fee = Column(Numeric(12, 2), nullable=False, default=0)
    trash_fee = Column(Numeric(12, 2), nullable=False, default=0)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
