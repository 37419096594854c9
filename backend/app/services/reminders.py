"""Reminder listings: occupied rooms with rent due soon and every unpaid bill."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from .billing import quantize_money
from .billing_periods import days_in_month

LOGGER = logging.getLogger(__name__)

DEFAULT_DAYS_AHEAD = 3

_STATUS_ORDER = {
    schemas.ReminderStatus.OVERDUE: 0,
    schemas.ReminderStatus.DUE_SOON: 1,
    schemas.ReminderStatus.UNPAID: 2,
}


def due_date_for(move_in_date: Optional[date], reference_date: date) -> Optional[date]:
    """Return this month's due date, the move-in day clamped to the month length."""

    if move_in_date is None:
        return None
    day = min(move_in_date.day, days_in_month(reference_date.year, reference_date.month))
    return date(reference_date.year, reference_date.month, day)


def classify_due_date(
    due_date: Optional[date], reference_date: date, days_ahead: int = DEFAULT_DAYS_AHEAD
) -> tuple[schemas.ReminderStatus, Optional[int]]:
    if due_date is None:
        return schemas.ReminderStatus.UNPAID, None
    days_until_due = (due_date - reference_date).days
    if days_until_due < 0:
        return schemas.ReminderStatus.OVERDUE, days_until_due
    if days_until_due <= days_ahead:
        return schemas.ReminderStatus.DUE_SOON, days_until_due
    return schemas.ReminderStatus.UNPAID, days_until_due


def bill_due_date(bill: models.Bill, room: Optional[models.Room]) -> date:
    """Rent falls due on the move-in day of the bill's first month, never before it starts."""

    due = due_date_for(room.move_in_date if room else None, bill.period_start)
    return bill.period_start if due is None or due < bill.period_start else due


_URGENCY_ORDER = {
    schemas.BillUrgency.OVERDUE: 0,
    schemas.BillUrgency.DUE_SOON: 1,
    schemas.BillUrgency.UPCOMING: 2,
}


class ReminderService:
    @staticmethod
    def due_soon(
        db: Session,
        reference_date: Optional[date] = None,
        days_ahead: int = DEFAULT_DAYS_AHEAD,
    ) -> schemas.DueSoonResponse:
        reference_date = reference_date or date.today()
        days_ahead = max(days_ahead, 0)

        rooms = (
            db.query(models.Room)
            .options(selectinload(models.Room.tenant), selectinload(models.Room.property))
            .filter(
                models.Room.status == models.RoomStatus.OCCUPIED,
                models.Room.tenant_id.isnot(None),
            )
            .all()
        )
        if not rooms:
            return schemas.DueSoonResponse(reference_date=reference_date, days_ahead=days_ahead)

        unpaid: dict[str, list[models.Bill]] = defaultdict(list)
        bills = (
            db.query(models.Bill)
            .filter(
                models.Bill.room_id.in_([room.id for room in rooms]),
                models.Bill.is_paid.is_(False),
            )
            .all()
        )
        for bill in bills:
            unpaid[bill.room_id].append(bill)

        items: list[schemas.DueSoonItem] = []
        for room in rooms:
            room_bills = unpaid.get(room.id)
            if not room_bills or room.tenant is None:
                continue

            outstanding = sum(
                (Decimal(bill.total_amount) - Decimal(bill.paid_amount or 0) for bill in room_bills),
                Decimal("0"),
            )
            due_date = due_date_for(room.move_in_date, reference_date)
            status, days_until_due = classify_due_date(due_date, reference_date, days_ahead)
            items.append(
                schemas.DueSoonItem(
                    room_id=room.id,
                    room_name=room.name,
                    property_id=room.property_id,
                    property_name=room.property.name if room.property else None,
                    tenant_id=room.tenant.id,
                    tenant_name=room.tenant.name,
                    tenant_contact=room.tenant.contact,
                    due_day=due_date.day if due_date else None,
                    due_date=due_date,
                    days_until_due=days_until_due,
                    status=status,
                    unpaid_bills=len(room_bills),
                    total_unpaid=quantize_money(outstanding),
                )
            )

        items.sort(
            key=lambda item: (
                _STATUS_ORDER[item.status],
                item.days_until_due if item.days_until_due is not None else float("inf"),
                item.room_name,
            )
        )

        counts = defaultdict(int)
        for item in items:
            counts[item.status] += 1
        LOGGER.debug("Due-soon listing for %s returned %d rooms", reference_date, len(items))
        return schemas.DueSoonResponse(
            reference_date=reference_date,
            days_ahead=days_ahead,
            overdue=counts[schemas.ReminderStatus.OVERDUE],
            due_soon=counts[schemas.ReminderStatus.DUE_SOON],
            unpaid=counts[schemas.ReminderStatus.UNPAID],
            items=items,
        )

    @staticmethod
    def unpaid_bills(
        db: Session,
        reference_date: Optional[date] = None,
        days_ahead: int = DEFAULT_DAYS_AHEAD,
    ) -> schemas.UnpaidBillsResponse:
        """List every unpaid bill with its due date, most urgent first."""

        reference_date = reference_date or date.today()
        days_ahead = max(days_ahead, 0)

        bills = (
            db.query(models.Bill)
            .options(
                selectinload(models.Bill.room).selectinload(models.Room.property),
                selectinload(models.Bill.tenant),
            )
            .filter(models.Bill.is_paid.is_(False))
            .all()
        )

        items: list[schemas.UnpaidBillItem] = []
        for bill in bills:
            room = bill.room
            due_date = bill_due_date(bill, room)
            days_until_due = (due_date - reference_date).days
            if days_until_due < 0:
                urgency = schemas.BillUrgency.OVERDUE
            elif days_until_due <= days_ahead:
                urgency = schemas.BillUrgency.DUE_SOON
            else:
                urgency = schemas.BillUrgency.UPCOMING

            paid = Decimal(bill.paid_amount or 0)
            items.append(
                schemas.UnpaidBillItem(
                    bill_id=bill.id,
                    billing_code=bill.billing_code,
                    room_id=bill.room_id,
                    room_name=room.name,
                    property_id=room.property_id,
                    property_name=room.property.name if room.property else None,
                    tenant_id=bill.tenant_id,
                    tenant_name=bill.tenant.name if bill.tenant else None,
                    tenant_contact=bill.tenant.contact if bill.tenant else None,
                    period_start=bill.period_start,
                    period_end=bill.period_end,
                    total_amount=quantize_money(bill.total_amount),
                    paid_amount=quantize_money(paid),
                    outstanding=quantize_money(Decimal(bill.total_amount) - paid),
                    due_date=due_date,
                    days_until_due=days_until_due,
                    urgency=urgency,
                )
            )

        items.sort(key=lambda item: (_URGENCY_ORDER[item.urgency], item.due_date, item.billing_code))
        counts = defaultdict(int)
        for item in items:
            counts[item.urgency] += 1
        return schemas.UnpaidBillsResponse(
            reference_date=reference_date,
            days_ahead=days_ahead,
            total=len(items),
            overdue=counts[schemas.BillUrgency.OVERDUE],
            due_soon=counts[schemas.BillUrgency.DUE_SOON],
            upcoming=counts[schemas.BillUrgency.UPCOMING],
            items=items,
        )
