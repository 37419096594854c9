"""Router exposing properties, their rate settings and the global fallback rates."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import PropertyService, ServiceError, SettingsService

router = APIRouter()
settings_router = APIRouter()


@router.get("", response_model=schemas.PropertyListResponse)
def list_properties(
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None, description="Match on name or address"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> schemas.PropertyListResponse:
    items, total = PropertyService.list_properties(db, skip=skip, limit=limit, search=search)
    return schemas.PropertyListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("", response_model=schemas.PropertyRead, status_code=status.HTTP_201_CREATED)
def create_property(
    property_in: schemas.PropertyCreate, db: Session = Depends(get_db)
) -> schemas.PropertyRead:
    return PropertyService.create_property(db, property_in)


@router.get("/{property_id}", response_model=schemas.PropertyRead)
def get_property(property_id: str, db: Session = Depends(get_db)) -> schemas.PropertyRead:
    try:
        return PropertyService.get_property(db, property_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.put("/{property_id}", response_model=schemas.PropertyRead)
def update_property(
    property_id: str, property_in: schemas.PropertyUpdate, db: Session = Depends(get_db)
) -> schemas.PropertyRead:
    try:
        return PropertyService.update_property(db, property_id, property_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(property_id: str, db: Session = Depends(get_db)) -> None:
    try:
        PropertyService.delete_property(db, property_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/{property_id}/settings", response_model=schemas.PropertySettingsRead)
def get_property_settings(
    property_id: str, db: Session = Depends(get_db)
) -> schemas.PropertySettingsRead:
    try:
        settings = PropertyService.get_settings(db, property_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    if settings is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property has no rate settings; global settings apply",
        )
    return settings


@router.put("/{property_id}/settings", response_model=schemas.PropertySettingsRead)
def update_property_settings(
    property_id: str,
    settings_in: schemas.PropertySettingsUpdate,
    db: Session = Depends(get_db),
) -> schemas.PropertySettingsRead:
    try:
        return PropertyService.upsert_settings(db, property_id, settings_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@settings_router.get("", response_model=schemas.GlobalSettingsRead)
def get_global_settings(db: Session = Depends(get_db)) -> schemas.GlobalSettingsRead:
    return SettingsService.get_global_settings(db)


@settings_router.put("", response_model=schemas.GlobalSettingsRead)
def update_global_settings(
    settings_in: schemas.GlobalSettingsUpdate, db: Session = Depends(get_db)
) -> schemas.GlobalSettingsRead:
    try:
        return SettingsService.update_global_settings(db, settings_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
