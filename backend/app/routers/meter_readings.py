"""Router exposing meter reading operations."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import MeterReadingService, ServiceError

router = APIRouter()


@router.get("", response_model=schemas.MeterReadingListResponse)
def list_readings(
    db: Session = Depends(get_db),
    room_id: Optional[str] = Query(None, description="Filter by room"),
    period: Optional[str] = Query(None, description="Filter by month using YYYY-MM"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> schemas.MeterReadingListResponse:
    try:
        items, total = MeterReadingService.list_readings(
            db, skip=skip, limit=limit, room_id=room_id, period=period
        )
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return schemas.MeterReadingListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("", response_model=schemas.MeterReadingRead, status_code=status.HTTP_201_CREATED)
def create_reading(
    reading_in: schemas.MeterReadingCreate, db: Session = Depends(get_db)
) -> schemas.MeterReadingRead:
    try:
        return MeterReadingService.create_reading(db, reading_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.put("", response_model=schemas.MeterReadingRead)
def upsert_reading(
    reading_in: schemas.MeterReadingCreate, response: Response, db: Session = Depends(get_db)
) -> schemas.MeterReadingRead:
    """Create the room's reading for the period, or overwrite it if one exists."""

    try:
        reading, created = MeterReadingService.upsert_reading(db, reading_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    if created:
        response.status_code = status.HTTP_201_CREATED
    return reading


@router.get("/{reading_id}", response_model=schemas.MeterReadingRead)
def get_reading(reading_id: str, db: Session = Depends(get_db)) -> schemas.MeterReadingRead:
    try:
        return MeterReadingService.get_reading(db, reading_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.put("/{reading_id}", response_model=schemas.MeterReadingRead)
def update_reading(
    reading_id: str, reading_in: schemas.MeterReadingUpdate, db: Session = Depends(get_db)
) -> schemas.MeterReadingRead:
    try:
        return MeterReadingService.update_reading(db, reading_id, reading_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.delete("/{reading_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reading(reading_id: str, db: Session = Depends(get_db)) -> None:
    try:
        MeterReadingService.delete_reading(db, reading_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
