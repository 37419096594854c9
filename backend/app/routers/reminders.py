"""Reminder listings: rooms with rent due soon and all unpaid bills."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import ReminderService

router = APIRouter()


@router.get("/due-soon", response_model=schemas.DueSoonResponse)
def list_due_soon(
    db: Session = Depends(get_db),
    reference_date: Optional[date] = Query(None, description="Day to evaluate, defaults to today"),
    days_ahead: int = Query(3, ge=0, le=31, description="Window for the due_soon bucket"),
) -> schemas.DueSoonResponse:
    """Return occupied rooms with unpaid bills, most urgent first."""

    return ReminderService.due_soon(db, reference_date=reference_date, days_ahead=days_ahead)


@router.get("", response_model=schemas.UnpaidBillsResponse)
def list_unpaid_bills(
    db: Session = Depends(get_db),
    reference_date: Optional[date] = Query(None, description="Day to evaluate, defaults to today"),
    days_ahead: int = Query(3, ge=0, le=31, description="Window for the due_soon bucket"),
) -> schemas.UnpaidBillsResponse:
    """Return every unpaid bill bucketed into overdue, due_soon and upcoming."""

    return ReminderService.unpaid_bills(db, reference_date=reference_date, days_ahead=days_ahead)
