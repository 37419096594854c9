"""Business logic for properties and their utility rate settings."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from .errors import ConflictError, NotFoundError, ValidationError

LOGGER = logging.getLogger(__name__)

DEFAULT_COST_PER_KWH = Decimal("1500")
DEFAULT_WATER_FEE = Decimal("0")
DEFAULT_TRASH_FEE = Decimal("0")


def _validate_rates(data: schemas.RateValues) -> None:
    if data.cost_per_kwh <= 0:
        raise ValidationError("cost_per_kwh must be greater than zero")
    if data.water_fee < 0 or data.trash_fee < 0:
        raise ValidationError("Fees must not be negative")


class PropertyService:
    """Encapsulates CRUD operations for properties."""

    @staticmethod
    def list_properties(
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        search: Optional[str] = None,
    ) -> Tuple[Iterable[models.Property], int]:
        query = db.query(models.Property).options(selectinload(models.Property.settings))
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(
                func.lower(models.Property.name).like(pattern)
                | func.lower(models.Property.address).like(pattern)
            )

        total = query.count()
        items = (
            query.order_by(models.Property.name.asc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def get_property(db: Session, property_id: str) -> models.Property:
        prop = db.query(models.Property).filter(models.Property.id == property_id).first()
        if prop is None:
            raise NotFoundError("Property not found", context={"property_id": property_id})
        return prop

    @staticmethod
    def create_property(db: Session, data: schemas.PropertyCreate) -> models.Property:
        prop = models.Property(**data.model_dump())
        db.add(prop)
        db.commit()
        db.refresh(prop)
        LOGGER.info("Property %s created", prop.id)
        return prop

    @staticmethod
    def update_property(
        db: Session, property_id: str, data: schemas.PropertyUpdate
    ) -> models.Property:
        prop = PropertyService.get_property(db, property_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(prop, field, value)
        db.add(prop)
        db.commit()
        db.refresh(prop)
        return prop

    @staticmethod
    def delete_property(db: Session, property_id: str) -> None:
        prop = PropertyService.get_property(db, property_id)
        room_count = (
            db.query(func.count(models.Room.id))
            .filter(models.Room.property_id == prop.id)
            .scalar()
        )
        if room_count:
            raise ConflictError(
                "Cannot delete a property that still has rooms",
                context={"property_id": prop.id, "rooms": room_count},
            )
        db.delete(prop)
        db.commit()
        LOGGER.info("Property %s deleted", property_id)

    @staticmethod
    def get_settings(db: Session, property_id: str) -> Optional[models.PropertySettings]:
        PropertyService.get_property(db, property_id)
        return (
            db.query(models.PropertySettings)
            .filter(models.PropertySettings.property_id == property_id)
            .first()
        )

    @staticmethod
    def upsert_settings(
        db: Session, property_id: str, data: schemas.PropertySettingsUpdate
    ) -> models.PropertySettings:
        _validate_rates(data)
        settings = PropertyService.get_settings(db, property_id)
        if settings is None:
            settings = models.PropertySettings(property_id=property_id)
        settings.cost_per_kwh = data.cost_per_kwh
        settings.water_fee = data.water_fee
        settings.trash_fee = data.trash_fee
        db.add(settings)
        db.commit()
        db.refresh(settings)
        LOGGER.info("Rate settings updated for property %s", property_id)
        return settings


class SettingsService:
    """Reads and writes the global fallback rates."""

    @staticmethod
    def get_global_settings(db: Session) -> models.GlobalSettings:
        """Return the stored global rates or an unsaved row holding the defaults."""

        settings = db.query(models.GlobalSettings).order_by(models.GlobalSettings.id.asc()).first()
        if settings is not None:
            return settings
        return models.GlobalSettings(
            cost_per_kwh=DEFAULT_COST_PER_KWH,
            water_fee=DEFAULT_WATER_FEE,
            trash_fee=DEFAULT_TRASH_FEE,
        )

    @staticmethod
    def update_global_settings(
        db: Session, data: schemas.GlobalSettingsUpdate
    ) -> models.GlobalSettings:
        _validate_rates(data)
        settings = SettingsService.get_global_settings(db)
        settings.cost_per_kwh = data.cost_per_kwh
        settings.water_fee = data.water_fee
        settings.trash_fee = data.trash_fee
        db.add(settings)
        db.commit()
        db.refresh(settings)
        return settings
