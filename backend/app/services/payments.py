"""Business logic for partial payments against bills."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from time import perf_counter
from typing import Iterable, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas
from .billing import quantize_money
from .errors import InvalidStateError, NotFoundError, ServiceError, ValidationError
from .observability import ObservabilityService

LOGGER = logging.getLogger(__name__)


class PaymentService:
    """Records payments and keeps a bill's paid amount in sync with its payment rows."""

    @staticmethod
    def _resolve_bill(db: Session, bill_id: str, *, for_update: bool = False) -> models.Bill:
        query = db.query(models.Bill).filter(models.Bill.id == bill_id)
        if for_update:
            query = query.with_for_update()
        bill = query.first()
        if bill is None:
            raise NotFoundError("Bill not found", context={"bill_id": bill_id})
        return bill

    @staticmethod
    def _paid_total(db: Session, bill_id: str) -> Decimal:
        total = (
            db.query(func.coalesce(func.sum(models.Payment.amount), 0))
            .filter(models.Payment.bill_id == bill_id)
            .scalar()
        )
        return quantize_money(total or 0)

    @classmethod
    def _sync_bill(cls, db: Session, bill: models.Bill) -> None:
        """Re-derive ``paid_amount``, ``is_paid`` and ``paid_at`` from the payment rows."""

        paid = cls._paid_total(db, bill.id)
        total = Decimal(bill.total_amount)
        bill.paid_amount = paid
        if paid > 0 and paid >= total:
            if not bill.is_paid:
                bill.is_paid = True
                bill.paid_at = datetime.now(timezone.utc)
        else:
            bill.is_paid = False
            bill.paid_at = None
        db.add(bill)

    @classmethod
    def record_payment(cls, db: Session, data: schemas.PaymentCreate) -> models.Payment:
        started = perf_counter()
        labels: dict[str, object] = {
            "bill_id": data.bill_id,
            "payment_method": str(data.method.value),
        }

        try:
            bill = cls._resolve_bill(db, data.bill_id, for_update=True)
            if bill.is_paid:
                raise InvalidStateError("Bill is already paid", context={"bill_id": bill.id})

            amount = quantize_money(data.amount)
            if amount <= 0:
                raise ValidationError("Payment amount must be greater than zero")

            remaining = quantize_money(Decimal(bill.total_amount) - cls._paid_total(db, bill.id))
            if amount > remaining:
                raise ValidationError(
                    f"Payment amount exceeds remaining balance of {remaining}",
                    context={"bill_id": bill.id, "remaining": str(remaining)},
                )

            payment = models.Payment(
                bill_id=bill.id,
                amount=amount,
                method=data.method,
                paid_on=data.paid_on or date.today(),
                notes=data.notes,
                recorded_by=data.recorded_by,
            )
            db.add(payment)
            db.flush()

            cls._sync_bill(db, bill)
            db.commit()
            db.refresh(payment)
        except ServiceError as exc:
            ObservabilityService.record_rejection(
                db, "payments.record", str(exc), labels=labels, started=started
            )
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            LOGGER.exception("Failed to record payment for bill %s", data.bill_id)
            ObservabilityService.record_failure(
                db, "payments.record", str(exc), labels=labels, started=started
            )
            raise

        LOGGER.info(
            "Recorded payment %s of %s for bill %s", payment.id, payment.amount, payment.bill_id
        )
        return payment

    @classmethod
    def delete_payment(cls, db: Session, payment_id: str) -> None:
        payment = cls.get_payment(db, payment_id)
        bill = cls._resolve_bill(db, payment.bill_id, for_update=True)
        db.delete(payment)
        db.flush()
        cls._sync_bill(db, bill)
        db.commit()
        LOGGER.info("Deleted payment %s from bill %s", payment_id, bill.id)

    @staticmethod
    def get_payment(db: Session, payment_id: str) -> models.Payment:
        payment = db.query(models.Payment).filter(models.Payment.id == payment_id).first()
        if payment is None:
            raise NotFoundError("Payment not found", context={"payment_id": payment_id})
        return payment

    @staticmethod
    def list_payments(
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        bill_id: Optional[str] = None,
        room_id: Optional[str] = None,
        method: Optional[models.PaymentMethod] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Tuple[Iterable[models.Payment], int]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date cannot be after end_date")

        query = db.query(models.Payment)

        if bill_id:
            query = query.filter(models.Payment.bill_id == bill_id)
        if room_id:
            query = query.join(models.Bill, models.Bill.id == models.Payment.bill_id).filter(
                models.Bill.room_id == room_id
            )
        if method is not None:
            query = query.filter(models.Payment.method == method)
        if start_date:
            query = query.filter(models.Payment.paid_on >= start_date)
        if end_date:
            query = query.filter(models.Payment.paid_on <= end_date)

        total = query.count()
        items = (
            query.order_by(models.Payment.paid_on.desc(), models.Payment.created_at.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total
