"""Router exposing bill generation and bill lifecycle operations."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import BillingService, ServiceError

LOGGER = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=schemas.BillListResponse)
def list_bills(
    db: Session = Depends(get_db),
    room_id: Optional[str] = Query(None, description="Filter by room"),
    tenant_id: Optional[str] = Query(None, description="Filter by tenant"),
    property_id: Optional[str] = Query(None, description="Filter by property"),
    is_paid: Optional[bool] = Query(None, description="Filter by payment state"),
    period_from: Optional[date] = Query(None, description="Bills ending on or after this date"),
    period_to: Optional[date] = Query(None, description="Bills starting on or before this date"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> schemas.BillListResponse:
    """Return bills with pagination and filtering."""

    if period_from and period_to and period_from > period_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="period_from cannot be after period_to",
        )

    items, total = BillingService.list_bills(
        db,
        skip=skip,
        limit=limit,
        room_id=room_id,
        tenant_id=tenant_id,
        property_id=property_id,
        is_paid=is_paid,
        period_from=period_from,
        period_to=period_to,
    )
    return schemas.BillListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post(
    "/generate",
    response_model=schemas.BillRead,
    status_code=status.HTTP_201_CREATED,
)
def generate_bill(
    bill_in: schemas.BillGenerateRequest, db: Session = Depends(get_db)
) -> schemas.BillRead:
    """Compute and store a bill for a room and billing period."""

    try:
        bill = BillingService.generate_bill(db, bill_in)
    except ServiceError as exc:
        LOGGER.warning(
            "Bill generation rejected: %s",
            exc,
            extra={"room_id": bill_in.room_id, "period": bill_in.period or str(bill_in.period_start)},
        )
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc

    LOGGER.info(
        "Bill generated",
        extra={"bill_id": bill.id, "room_id": bill.room_id, "billing_code": bill.billing_code},
    )
    return bill


@router.post("/preview", response_model=schemas.BillChargesBreakdown)
def preview_bill(
    bill_in: schemas.BillGenerateRequest, db: Session = Depends(get_db)
) -> schemas.BillChargesBreakdown:
    """Return the charges a bill would carry without saving it."""

    try:
        return BillingService.preview_bill(db, bill_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/{bill_id}", response_model=schemas.BillRead)
def get_bill(bill_id: str, db: Session = Depends(get_db)) -> schemas.BillRead:
    try:
        return BillingService.get_bill(db, bill_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.patch("/{bill_id}", response_model=schemas.BillRead)
def update_bill(
    bill_id: str, bill_in: schemas.BillUpdate, db: Session = Depends(get_db)
) -> schemas.BillRead:
    try:
        return BillingService.update_bill(db, bill_id, bill_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.patch("/{bill_id}/pay", response_model=schemas.BillRead)
def mark_bill_paid(bill_id: str, db: Session = Depends(get_db)) -> schemas.BillRead:
    try:
        bill = BillingService.mark_bill_paid(db, bill_id)
    except ServiceError as exc:
        LOGGER.warning("Rejected mark-paid request", extra={"bill_id": bill_id})
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return bill


@router.put("/{bill_id}/period", response_model=schemas.BillRead)
def update_bill_period(
    bill_id: str, period_in: schemas.BillPeriodUpdate, db: Session = Depends(get_db)
) -> schemas.BillRead:
    """Move a bill to a new period and recompute its rent."""

    try:
        return BillingService.update_bill_period(
            db, bill_id, period_in.period_start, period_in.period_end
        )
    except ServiceError as exc:
        LOGGER.warning(
            "Rejected period update: %s",
            exc,
            extra={"bill_id": bill_id, "period_start": str(period_in.period_start)},
        )
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.delete("/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bill(bill_id: str, db: Session = Depends(get_db)) -> None:
    try:
        BillingService.delete_bill(db, bill_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post(
    "/{bill_id}/charges",
    response_model=schemas.BillRead,
    status_code=status.HTTP_201_CREATED,
)
def add_charge(
    bill_id: str, charge_in: schemas.BillChargeCreate, db: Session = Depends(get_db)
) -> schemas.BillRead:
    try:
        return BillingService.add_charge(db, bill_id, charge_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.put("/{bill_id}/charges/{charge_id}", response_model=schemas.BillRead)
def update_charge(
    bill_id: str,
    charge_id: str,
    charge_in: schemas.BillChargeUpdate,
    db: Session = Depends(get_db),
) -> schemas.BillRead:
    try:
        return BillingService.update_charge(db, bill_id, charge_id, charge_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.delete("/{bill_id}/charges/{charge_id}", response_model=schemas.BillRead)
def delete_charge(
    bill_id: str, charge_id: str, db: Session = Depends(get_db)
) -> schemas.BillRead:
    try:
        return BillingService.delete_charge(db, bill_id, charge_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
