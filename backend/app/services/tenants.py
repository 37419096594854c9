"""Business logic for tenants."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models, schemas
from .errors import ConflictError, NotFoundError

LOGGER = logging.getLogger(__name__)


class TenantService:
    """Encapsulates CRUD operations for tenants."""

    @staticmethod
    def list_tenants(
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        status: Optional[models.TenantStatus] = None,
        search: Optional[str] = None,
    ) -> Tuple[Iterable[models.Tenant], int]:
        query = db.query(models.Tenant)
        if status is not None:
            query = query.filter(models.Tenant.status == status)
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(
                func.lower(models.Tenant.name).like(pattern)
                | models.Tenant.contact.like(pattern)
                | models.Tenant.id_card_number.like(pattern)
            )

        total = query.count()
        items = (
            query.order_by(models.Tenant.name.asc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def get_tenant(db: Session, tenant_id: str) -> models.Tenant:
        tenant = db.query(models.Tenant).filter(models.Tenant.id == tenant_id).first()
        if tenant is None:
            raise NotFoundError("Tenant not found", context={"tenant_id": tenant_id})
        return tenant

    @staticmethod
    def create_tenant(db: Session, data: schemas.TenantCreate) -> models.Tenant:
        tenant = models.Tenant(**data.model_dump())
        db.add(tenant)
        db.commit()
        db.refresh(tenant)
        return tenant

    @staticmethod
    def update_tenant(db: Session, tenant_id: str, data: schemas.TenantUpdate) -> models.Tenant:
        tenant = TenantService.get_tenant(db, tenant_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(tenant, field, value)
        db.add(tenant)
        db.commit()
        db.refresh(tenant)
        return tenant

    @staticmethod
    def delete_tenant(db: Session, tenant_id: str) -> None:
        tenant = TenantService.get_tenant(db, tenant_id)
        assigned = (
            db.query(func.count(models.Room.id))
            .filter(models.Room.tenant_id == tenant.id)
            .scalar()
        )
        if assigned:
            raise ConflictError(
                "Cannot delete a tenant assigned to a room",
                context={"tenant_id": tenant.id},
            )
        db.delete(tenant)
        db.commit()
        LOGGER.info("Tenant %s deleted", tenant_id)
