"""Router exposing room operations."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..models.room import RoomStatus
from ..services import RoomService, ServiceError

router = APIRouter()


@router.get("", response_model=schemas.RoomListResponse)
def list_rooms(
    db: Session = Depends(get_db),
    property_id: Optional[str] = Query(None, description="Filter by property"),
    status_filter: Optional[RoomStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> schemas.RoomListResponse:
    items, total = RoomService.list_rooms(
        db, skip=skip, limit=limit, property_id=property_id, status=status_filter
    )
    return schemas.RoomListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("", response_model=schemas.RoomRead, status_code=status.HTTP_201_CREATED)
def create_room(room_in: schemas.RoomCreate, db: Session = Depends(get_db)) -> schemas.RoomRead:
    try:
        return RoomService.create_room(db, room_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/{room_id}", response_model=schemas.RoomRead)
def get_room(room_id: str, db: Session = Depends(get_db)) -> schemas.RoomRead:
    try:
        return RoomService.get_room(db, room_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.put("/{room_id}", response_model=schemas.RoomRead)
def update_room(
    room_id: str, room_in: schemas.RoomUpdate, db: Session = Depends(get_db)
) -> schemas.RoomRead:
    try:
        return RoomService.update_room(db, room_id, room_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(room_id: str, db: Session = Depends(get_db)) -> None:
    try:
        RoomService.delete_room(db, room_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
