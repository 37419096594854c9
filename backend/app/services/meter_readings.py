"""Business logic for monthly meter readings."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from .billing import BillingService
from .billing_periods import normalize_period_key
from .errors import ConflictError, InvalidStateError, NotFoundError, ValidationError

LOGGER = logging.getLogger(__name__)


class MeterReadingService:
    """Stores readings and refuses to change those already settled by a paid bill."""

    @staticmethod
    def list_readings(
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        room_id: Optional[str] = None,
        period: Optional[str] = None,
    ) -> Tuple[Iterable[models.MeterReading], int]:
        query = db.query(models.MeterReading)
        if room_id:
            query = query.filter(models.MeterReading.room_id == room_id)
        if period:
            key, _, _ = normalize_period_key(period)
            query = query.filter(models.MeterReading.period == key)

        total = query.count()
        items = (
            query.order_by(models.MeterReading.period.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def get_reading(db: Session, reading_id: str) -> models.MeterReading:
        reading = (
            db.query(models.MeterReading).filter(models.MeterReading.id == reading_id).first()
        )
        if reading is None:
            raise NotFoundError("Meter reading not found", context={"reading_id": reading_id})
        return reading

    @staticmethod
    def _ensure_not_settled(db: Session, reading: models.MeterReading, action: str) -> None:
        paid = BillingService.paid_bills_for_reading(db, reading.id)
        if paid:
            raise InvalidStateError(
                f"Cannot {action} a meter reading used by a paid bill",
                context={"reading_id": reading.id, "billing_code": paid[0].billing_code},
            )

    @staticmethod
    def create_reading(db: Session, data: schemas.MeterReadingCreate) -> models.MeterReading:
        if data.meter_end < data.meter_start:
            raise ValidationError("meter_end must be greater than or equal to meter_start")
        room = db.query(models.Room).filter(models.Room.id == data.room_id).first()
        if room is None:
            raise NotFoundError("Room not found", context={"room_id": data.room_id})

        key, _, _ = normalize_period_key(data.period)
        existing = (
            db.query(models.MeterReading)
            .filter(models.MeterReading.room_id == room.id, models.MeterReading.period == key)
            .first()
        )
        if existing is not None:
            raise ConflictError(
                f"A meter reading for {key} already exists for this room",
                context={"room_id": room.id, "period": key},
            )

        reading = models.MeterReading(
            room_id=room.id,
            period=key,
            meter_start=data.meter_start,
            meter_end=data.meter_end,
            recorded_by=data.recorded_by,
        )
        db.add(reading)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError(
                f"A meter reading for {key} already exists for this room",
                context={"room_id": room.id, "period": key},
            ) from exc
        db.refresh(reading)
        return reading

    @classmethod
    def upsert_reading(
        cls, db: Session, data: schemas.MeterReadingCreate
    ) -> tuple[models.MeterReading, bool]:
        """Insert the room's reading for ``data.period`` or overwrite the stored one.

        Returns the reading and whether it was newly created. A reading that a
        paid bill was generated from is never overwritten.
        """

        key, _, _ = normalize_period_key(data.period)
        existing = (
            db.query(models.MeterReading)
            .filter(models.MeterReading.room_id == data.room_id, models.MeterReading.period == key)
            .with_for_update()
            .first()
        )
        if existing is None:
            return cls.create_reading(db, data), True

        if data.meter_end < data.meter_start:
            raise ValidationError("meter_end must be greater than or equal to meter_start")
        cls._ensure_not_settled(db, existing, "update")

        existing.meter_start = data.meter_start
        existing.meter_end = data.meter_end
        existing.recorded_by = data.recorded_by
        existing.recorded_at = datetime.now(timezone.utc)
        db.add(existing)
        db.commit()
        db.refresh(existing)
        LOGGER.info("Meter reading %s for %s overwritten", existing.id, key)
        return existing, False

    @classmethod
    def update_reading(
        cls, db: Session, reading_id: str, data: schemas.MeterReadingUpdate
    ) -> models.MeterReading:
        reading = cls.get_reading(db, reading_id)
        cls._ensure_not_settled(db, reading, "update")

        updates = data.model_dump(exclude_unset=True)
        meter_start = updates.get("meter_start")
        meter_end = updates.get("meter_end")
        meter_start = reading.meter_start if meter_start is None else meter_start
        meter_end = reading.meter_end if meter_end is None else meter_end
        if meter_end < meter_start:
            raise ValidationError("meter_end must be greater than or equal to meter_start")

        reading.meter_start = meter_start
        reading.meter_end = meter_end
        if "recorded_by" in updates:
            reading.recorded_by = updates["recorded_by"]
        db.add(reading)
        db.commit()
        db.refresh(reading)
        return reading

    @classmethod
    def delete_reading(cls, db: Session, reading_id: str) -> None:
        reading = cls.get_reading(db, reading_id)
        cls._ensure_not_settled(db, reading, "delete")
        db.delete(reading)
        db.commit()
        LOGGER.info("Meter reading %s deleted", reading_id)
