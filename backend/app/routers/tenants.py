"""Router exposing tenant operations."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..models.tenant import TenantStatus
from ..services import ServiceError, TenantService

router = APIRouter()


@router.get("", response_model=schemas.TenantListResponse)
def list_tenants(
    db: Session = Depends(get_db),
    status_filter: Optional[TenantStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Match on name, contact or ID card"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> schemas.TenantListResponse:
    items, total = TenantService.list_tenants(
        db, skip=skip, limit=limit, status=status_filter, search=search
    )
    return schemas.TenantListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("", response_model=schemas.TenantRead, status_code=status.HTTP_201_CREATED)
def create_tenant(tenant_in: schemas.TenantCreate, db: Session = Depends(get_db)) -> schemas.TenantRead:
    return TenantService.create_tenant(db, tenant_in)


@router.get("/{tenant_id}", response_model=schemas.TenantRead)
def get_tenant(tenant_id: str, db: Session = Depends(get_db)) -> schemas.TenantRead:
    try:
        return TenantService.get_tenant(db, tenant_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.put("/{tenant_id}", response_model=schemas.TenantRead)
def update_tenant(
    tenant_id: str, tenant_in: schemas.TenantUpdate, db: Session = Depends(get_db)
) -> schemas.TenantRead:
    try:
        return TenantService.update_tenant(db, tenant_id, tenant_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tenant(tenant_id: str, db: Session = Depends(get_db)) -> None:
    try:
        TenantService.delete_tenant(db, tenant_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
