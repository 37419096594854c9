"""Payments against bills: partial payments until the bill is settled."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..models.payment import PaymentMethod
from ..services import PaymentService, ServiceError

router = APIRouter()


@router.get("", response_model=schemas.PaymentListResponse)
def list_payments(
    db: Session = Depends(get_db),
    bill_id: Optional[str] = None,
    room_id: Optional[str] = None,
    method: Optional[PaymentMethod] = None,
    start_date: Optional[date] = Query(None, description="Inclusive lower bound on paid_on"),
    end_date: Optional[date] = Query(None, description="Inclusive upper bound on paid_on"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> schemas.PaymentListResponse:
    try:
        items, total = PaymentService.list_payments(
            db,
            bill_id=bill_id,
            room_id=room_id,
            method=method,
            start_date=start_date,
            end_date=end_date,
            skip=skip,
            limit=limit,
        )
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return schemas.PaymentListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("", response_model=schemas.PaymentRead, status_code=status.HTTP_201_CREATED)
def create_payment(payment_in: schemas.PaymentCreate, db: Session = Depends(get_db)) -> schemas.PaymentRead:
    """Record a payment; it may not exceed the bill's remaining balance."""

    try:
        return PaymentService.record_payment(db, payment_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/{payment_id}", response_model=schemas.PaymentRead)
def get_payment(payment_id: str, db: Session = Depends(get_db)) -> schemas.PaymentRead:
    try:
        return PaymentService.get_payment(db, payment_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(payment_id: str, db: Session = Depends(get_db)) -> None:
    """Remove a payment and reopen the bill if it no longer covers the total."""

    try:
        PaymentService.delete_payment(db, payment_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
