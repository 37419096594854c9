"""Business logic for rooms."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from .billing import BillingService
from .errors import ConflictError, NotFoundError
from .properties import PropertyService
from .tenants import TenantService

LOGGER = logging.getLogger(__name__)


class RoomService:
    """Encapsulates CRUD operations for rooms."""

    @staticmethod
    def list_rooms(
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        property_id: Optional[str] = None,
        status: Optional[models.RoomStatus] = None,
    ) -> Tuple[Iterable[models.Room], int]:
        query = db.query(models.Room).options(selectinload(models.Room.tenant))
        if property_id:
            query = query.filter(models.Room.property_id == property_id)
        if status is not None:
            query = query.filter(models.Room.status == status)

        total = query.count()
        items = (
            query.order_by(models.Room.name.asc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def get_room(db: Session, room_id: str) -> models.Room:
        room = (
            db.query(models.Room)
            .options(selectinload(models.Room.tenant))
            .filter(models.Room.id == room_id)
            .first()
        )
        if room is None:
            raise NotFoundError("Room not found", context={"room_id": room_id})
        return room

    @staticmethod
    def _apply_tenant(db: Session, room: models.Room, tenant_id: Optional[str]) -> None:
        if tenant_id:
            TenantService.get_tenant(db, tenant_id)
            room.tenant_id = tenant_id
            room.status = models.RoomStatus.OCCUPIED
        else:
            room.tenant_id = None
            # Rooms under maintenance keep that status when the tenant leaves.
            if room.status == models.RoomStatus.OCCUPIED:
                room.status = models.RoomStatus.AVAILABLE

    @staticmethod
    def create_room(db: Session, data: schemas.RoomCreate) -> models.Room:
        PropertyService.get_property(db, data.property_id)
        duplicate = (
            db.query(models.Room.id)
            .filter(models.Room.property_id == data.property_id, models.Room.name == data.name)
            .first()
        )
        if duplicate is not None:
            raise ConflictError(
                "A room with this name already exists in the property",
                context={"property_id": data.property_id, "name": data.name},
            )
        payload = data.model_dump(exclude={"tenant_id"})
        room = models.Room(**payload)
        RoomService._apply_tenant(db, room, data.tenant_id)
        db.add(room)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError(
                "A room with this name already exists in the property",
                context={"property_id": data.property_id, "name": data.name},
            ) from exc
        db.refresh(room)
        LOGGER.info("Room %s created in property %s", room.id, room.property_id)
        return room

    @staticmethod
    def update_room(db: Session, room_id: str, data: schemas.RoomUpdate) -> models.Room:
        room = RoomService.get_room(db, room_id)
        updates = data.model_dump(exclude_unset=True)

        if "tenant_id" in updates:
            RoomService._apply_tenant(db, room, updates.pop("tenant_id"))
        for field, value in updates.items():
            if value is None and field != "move_in_date":
                continue
            setattr(room, field, value)

        db.add(room)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError(
                "A room with this name already exists in the property",
                context={"room_id": room_id},
            ) from exc
        db.refresh(room)
        return room

    @staticmethod
    def delete_room(db: Session, room_id: str) -> None:
        room = RoomService.get_room(db, room_id)
        bill_count = BillingService.count_bills_for_room(db, room.id)
        if bill_count:
            raise ConflictError(
                "Cannot delete a room that has bills",
                context={"room_id": room.id, "bills": bill_count},
            )
        db.delete(room)
        db.commit()
        LOGGER.info("Room %s deleted", room_id)
