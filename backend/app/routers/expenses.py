from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import ExpenseService, ServiceError

router = APIRouter()


@router.get("", response_model=schemas.ExpenseListResponse)
def list_expenses(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    property_id: Optional[str] = None,
    category: Optional[str] = Query(None, description="Case-insensitive category match"),
    start_date: Optional[date] = Query(None, description="Inclusive lower bound on expense_date"),
    end_date: Optional[date] = Query(None, description="Inclusive upper bound on expense_date"),
    min_amount: Optional[Decimal] = Query(None, ge=0),
    max_amount: Optional[Decimal] = Query(None, ge=0),
) -> schemas.ExpenseListResponse:
    try:
        items, total = ExpenseService.list_expenses(
            db,
            skip=skip,
            limit=limit,
            property_id=property_id,
            category=category,
            start_date=start_date,
            end_date=end_date,
            min_amount=min_amount,
            max_amount=max_amount,
        )
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return schemas.ExpenseListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("", response_model=schemas.ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense(expense_in: schemas.ExpenseCreate, db: Session = Depends(get_db)) -> schemas.ExpenseRead:
    try:
        return ExpenseService.create_expense(db, expense_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/{expense_id}", response_model=schemas.ExpenseRead)
def get_expense(expense_id: str, db: Session = Depends(get_db)) -> schemas.ExpenseRead:
    try:
        return ExpenseService.get_expense(db, expense_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.patch("/{expense_id}", response_model=schemas.ExpenseRead)
def update_expense(
    expense_id: str, expense_in: schemas.ExpenseUpdate, db: Session = Depends(get_db)
) -> schemas.ExpenseRead:
    try:
        return ExpenseService.update_expense(db, expense_id, expense_in)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(expense_id: str, db: Session = Depends(get_db)) -> None:
    try:
        ExpenseService.delete_expense(db, expense_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
