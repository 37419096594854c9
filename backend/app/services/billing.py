"""Bill generation, proration and the paid-bill mutation guard."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_EVEN, Decimal
from time import perf_counter
from typing import Iterable, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from .billing_periods import (
    calculate_months_covered,
    compute_proration_factor,
    date_ranges_overlap,
    period_key_for,
    resolve_period,
)
from .errors import ConflictError, InvalidStateError, NotFoundError, ServiceError, ValidationError
from .observability import ObservabilityService
from .properties import SettingsService

LOGGER = logging.getLogger(__name__)

MONEY_QUANTUM = Decimal("0.01")
FACTOR_QUANTUM = Decimal("0.0001")
ADDITIONAL_COST_LINE_NAME = "Additional cost"


def quantize_money(value) -> Decimal:
    return Decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_EVEN)


@dataclass(frozen=True)
class RateSettings:
    """Utility rates handed to the calculator for one bill."""

    cost_per_kwh: Decimal
    water_fee: Decimal
    trash_fee: Decimal

    @classmethod
    def from_record(cls, record) -> "RateSettings":
        return cls(
            cost_per_kwh=Decimal(record.cost_per_kwh),
            water_fee=Decimal(record.water_fee),
            trash_fee=Decimal(record.trash_fee),
        )

    def override(
        self,
        *,
        cost_per_kwh: Optional[Decimal] = None,
        water_fee: Optional[Decimal] = None,
        trash_fee: Optional[Decimal] = None,
    ) -> "RateSettings":
        changes = {
            name: Decimal(value)
            for name, value in (
                ("cost_per_kwh", cost_per_kwh),
                ("water_fee", water_fee),
                ("trash_fee", trash_fee),
            )
            if value is not None
        }
        return replace(self, **changes)


@dataclass(frozen=True)
class ChargeBreakdown:
    room_price: Decimal
    usage_cost: Decimal
    water_fee: Decimal
    trash_fee: Decimal
    additional_cost: Decimal

    @property
    def total_amount(self) -> Decimal:
        return (
            self.room_price
            + self.usage_cost
            + self.water_fee
            + self.trash_fee
            + self.additional_cost
        )


def calculate_charge_line_total(quantity: int, unit_price, discount=Decimal("0")) -> Decimal:
    """Return ``quantity x unit_price - discount`` for an additional charge line."""

    if quantity < 1:
        raise ValidationError("quantity must be at least 1")
    unit_price = Decimal(unit_price)
    discount = Decimal(discount or 0)
    if unit_price < 0 or discount < 0:
        raise ValidationError("unit_price and discount must not be negative")
    gross = unit_price * quantity
    if discount > gross:
        raise ValidationError("discount cannot exceed the line amount")
    return quantize_money(gross - discount)


def calculate_rent(base_price, months_covered, proration_factor) -> Decimal:
    return quantize_money(Decimal(base_price) * Decimal(months_covered) * Decimal(proration_factor))


def calculate_bill_charges(
    *,
    base_price,
    months_covered,
    proration_factor,
    meter_start: int,
    meter_end: int,
    rates: RateSettings,
    occupant_count: int = 1,
    use_trash_service: bool = True,
    additional_cost=Decimal("0"),
) -> ChargeBreakdown:
    """Compute the itemized charges of a bill.

    Rent, water and trash scale with ``months_covered`` and the proration
    factor. Electricity is billed on the measured consumption only. Every
    component is rounded half-even to cents before summing, so the total is
    the exact sum of the stored components.
    """

    if meter_end < meter_start:
        raise ValidationError("meter_end must be greater than or equal to meter_start")
    months = Decimal(months_covered)
    if months <= 0:
        raise ValidationError("months_covered must be greater than zero")
    factor = Decimal(proration_factor)

    room_price = calculate_rent(base_price, months, factor)
    usage_cost = quantize_money(Decimal(meter_end - meter_start) * rates.cost_per_kwh)
    water_fee = quantize_money(rates.water_fee * Decimal(occupant_count) * months * factor)
    if use_trash_service:
        trash_fee = quantize_money(rates.trash_fee * months * factor)
    else:
        trash_fee = quantize_money(0)

    return ChargeBreakdown(
        room_price=room_price,
        usage_cost=usage_cost,
        water_fee=water_fee,
        trash_fee=trash_fee,
        additional_cost=quantize_money(additional_cost),
    )


@dataclass
class _BillDraft:
    room: models.Room
    period_start: date
    period_end: date
    months_covered: Decimal
    proration_factor: Decimal
    meter_start: int
    meter_end: int
    meter_reading: Optional[models.MeterReading]
    rates: RateSettings
    charges: ChargeBreakdown
    lines: list[tuple[schemas.BillChargeCreate, Decimal]]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BillingService:
    """Generates bills and guards every mutation of a paid bill."""

    @staticmethod
    def resolve_rates(db: Session, property_id: str) -> RateSettings:
        """Return the property's rates, falling back to the global settings."""

        settings = (
            db.query(models.PropertySettings)
            .filter(models.PropertySettings.property_id == property_id)
            .first()
        )
        if settings is not None:
            return RateSettings.from_record(settings)
        return RateSettings.from_record(SettingsService.get_global_settings(db))

    @staticmethod
    def _get_room(db: Session, room_id: str, *, for_update: bool = False) -> models.Room:
        query = db.query(models.Room).filter(models.Room.id == room_id)
        if for_update:
            query = query.with_for_update()
        room = query.first()
        if room is None:
            raise NotFoundError("Room not found", context={"room_id": room_id})
        return room

    @staticmethod
    def _get_bill(db: Session, bill_id: str, *, for_update: bool = False) -> models.Bill:
        query = (
            db.query(models.Bill)
            .options(selectinload(models.Bill.charges))
            .options(selectinload(models.Bill.payments))
            .filter(models.Bill.id == bill_id)
        )
        if for_update:
            query = query.with_for_update()
        bill = query.first()
        if bill is None:
            raise NotFoundError("Bill not found", context={"bill_id": bill_id})
        return bill

    @staticmethod
    def _ensure_unpaid(bill: models.Bill, action: str = "modify") -> None:
        if bill.is_paid:
            raise InvalidStateError(
                f"Cannot {action} a paid bill",
                context={"bill_id": bill.id, "billing_code": bill.billing_code},
            )

    @staticmethod
    def ensure_no_overlap(
        db: Session,
        room_id: str,
        period_start: date,
        period_end: date,
        *,
        exclude_bill_id: Optional[str] = None,
    ) -> None:
        """Reject the range when any other bill of the room overlaps it, paid or not."""

        query = db.query(models.Bill).filter(
            models.Bill.room_id == room_id,
            models.Bill.period_start <= period_end,
            models.Bill.period_end >= period_start,
        )
        if exclude_bill_id is not None:
            query = query.filter(models.Bill.id != exclude_bill_id)

        for existing in query.order_by(models.Bill.period_start.asc()).all():
            if date_ranges_overlap(period_start, period_end, existing.period_start, existing.period_end):
                raise ConflictError(
                    "Billing period overlaps existing bill "
                    f"{existing.billing_code} ({existing.period_start.isoformat()} to "
                    f"{existing.period_end.isoformat()})",
                    context={
                        "room_id": room_id,
                        "conflicting_bill_id": existing.id,
                        "conflicting_billing_code": existing.billing_code,
                    },
                )

    @staticmethod
    def _validate_request(data: schemas.BillGenerateRequest) -> None:
        if data.meter_start is not None and data.meter_end is not None:
            if data.meter_start < 0:
                raise ValidationError("meter_start must not be negative")
            if data.meter_end < data.meter_start:
                raise ValidationError("meter_end must be greater than or equal to meter_start")
        if data.cost_per_kwh is not None and data.cost_per_kwh <= 0:
            raise ValidationError("cost_per_kwh must be greater than zero")
        for name in ("water_fee", "trash_fee", "additional_cost"):
            value = getattr(data, name)
            if value is not None and value < 0:
                raise ValidationError(f"{name} must not be negative")
        if data.months_covered is not None and data.months_covered <= 0:
            raise ValidationError("months_covered must be greater than zero")

    @staticmethod
    def _resolve_meter_values(
        db: Session, room: models.Room, data: schemas.BillGenerateRequest, period_start: date
    ) -> tuple[int, int, Optional[models.MeterReading]]:
        if data.meter_start is not None and data.meter_end is not None:
            return data.meter_start, data.meter_end, None

        period_key = period_key_for(period_start)
        reading = (
            db.query(models.MeterReading)
            .filter(
                models.MeterReading.room_id == room.id,
                models.MeterReading.period == period_key,
            )
            .first()
        )
        if reading is None:
            raise ValidationError(
                f"No meter reading recorded for {period_key}; provide meter_start and meter_end",
                context={"room_id": room.id, "period": period_key},
            )
        return reading.meter_start, reading.meter_end, reading

    @classmethod
    def _build_draft(
        cls, db: Session, data: schemas.BillGenerateRequest, *, for_update: bool
    ) -> _BillDraft:
        cls._validate_request(data)
        room = cls._get_room(db, data.room_id, for_update=for_update)

        period_start, period_end, months = resolve_period(
            period=data.period,
            period_end_key=data.period_end_month,
            period_start=data.period_start,
            period_end=data.period_end,
            months_covered=data.months_covered,
        )
        cls.ensure_no_overlap(db, room.id, period_start, period_end)

        rates = cls.resolve_rates(db, room.property_id).override(
            cost_per_kwh=data.cost_per_kwh,
            water_fee=data.water_fee,
            trash_fee=data.trash_fee,
        )
        meter_start, meter_end, reading = cls._resolve_meter_values(db, room, data, period_start)

        # Bills never overlap, so a move-in inside this range means no earlier
        # bill covered it and this is the tenancy's first bill.
        factor = compute_proration_factor(room.move_in_date, period_start, period_end)

        lines: list[tuple[schemas.BillChargeCreate, Decimal]] = []
        if data.additional_cost and data.additional_cost > 0:
            extra = schemas.BillChargeCreate(
                name=ADDITIONAL_COST_LINE_NAME, quantity=1, unit_price=data.additional_cost
            )
            lines.append((extra, calculate_charge_line_total(1, data.additional_cost)))
        for line in data.charges:
            lines.append(
                (line, calculate_charge_line_total(line.quantity, line.unit_price, line.discount))
            )
        additional = sum((total for _, total in lines), Decimal("0"))

        charges = calculate_bill_charges(
            base_price=room.price,
            months_covered=months,
            proration_factor=factor,
            meter_start=meter_start,
            meter_end=meter_end,
            rates=rates,
            occupant_count=room.occupant_count or 1,
            use_trash_service=bool(room.use_trash_service),
            additional_cost=additional,
        )

        return _BillDraft(
            room=room,
            period_start=period_start,
            period_end=period_end,
            months_covered=months,
            proration_factor=factor,
            meter_start=meter_start,
            meter_end=meter_end,
            meter_reading=reading,
            rates=rates,
            charges=charges,
            lines=lines,
        )

    @staticmethod
    def next_billing_code(db: Session, period_start: date) -> str:
        """Return the next ``BILL-YYYY-MM-NNN`` code for the month of ``period_start``."""

        prefix = f"BILL-{period_start.year:04d}-{period_start.month:02d}-"
        codes = (
            db.query(models.Bill.billing_code)
            .filter(models.Bill.billing_code.like(f"{prefix}%"))
            .all()
        )
        sequence = 0
        for (code,) in codes:
            suffix = code[len(prefix):]
            if suffix.isdigit():
                sequence = max(sequence, int(suffix))
        return f"{prefix}{sequence + 1:03d}"

    @classmethod
    def preview_bill(
        cls, db: Session, data: schemas.BillGenerateRequest
    ) -> schemas.BillChargesBreakdown:
        """Compute the charges a bill would carry without storing anything."""

        draft = cls._build_draft(db, data, for_update=False)
        return cls._to_breakdown(draft)

    @classmethod
    def generate_bill(cls, db: Session, data: schemas.BillGenerateRequest) -> models.Bill:
        started = perf_counter()
        labels: dict[str, object] = {
            "room_id": data.room_id,
            "legacy_period": data.period is not None,
        }

        try:
            draft = cls._build_draft(db, data, for_update=True)
            charges = draft.charges

            bill = models.Bill(
                billing_code=cls.next_billing_code(db, draft.period_start),
                room_id=draft.room.id,
                tenant_id=draft.room.tenant_id,
                meter_reading_id=draft.meter_reading.id if draft.meter_reading else None,
                period_start=draft.period_start,
                period_end=draft.period_end,
                months_covered=draft.months_covered,
                meter_start=draft.meter_start,
                meter_end=draft.meter_end,
                cost_per_kwh=draft.rates.cost_per_kwh,
                proration_factor=draft.proration_factor.quantize(
                    FACTOR_QUANTUM, rounding=ROUND_HALF_EVEN
                ),
                room_price=charges.room_price,
                usage_cost=charges.usage_cost,
                water_fee=charges.water_fee,
                trash_fee=charges.trash_fee,
                additional_cost=charges.additional_cost,
                total_amount=charges.total_amount,
                paid_amount=Decimal("0.00"),
                is_paid=False,
                generated_at=_now(),
                notes=data.notes,
            )
            for line, total in draft.lines:
                bill.charges.append(
                    models.BillCharge(
                        name=line.name,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                        discount=line.discount,
                        total=total,
                        notes=line.notes,
                    )
                )

            db.add(bill)
            db.commit()
            db.refresh(bill)
        except ServiceError as exc:
            ObservabilityService.record_rejection(
                db, "bills.generate", str(exc), labels=labels, started=started
            )
            raise
        except IntegrityError as exc:
            db.rollback()
            ObservabilityService.record_rejection(
                db, "bills.generate", "duplicate room period", labels=labels, started=started
            )
            raise ConflictError(
                "A bill already exists for this room and period",
                context={"room_id": data.room_id},
            ) from exc
        except SQLAlchemyError as exc:
            db.rollback()
            LOGGER.exception("Failed to persist bill for room %s", data.room_id)
            ObservabilityService.record_failure(
                db, "bills.generate", str(exc), labels=labels, started=started
            )
            raise

        LOGGER.info(
            "Generated bill %s for room %s (%s to %s, total %s)",
            bill.billing_code,
            bill.room_id,
            bill.period_start,
            bill.period_end,
            bill.total_amount,
        )
        return bill

    @staticmethod
    def _to_breakdown(draft: _BillDraft) -> schemas.BillChargesBreakdown:
        charges = draft.charges
        return schemas.BillChargesBreakdown(
            room_id=draft.room.id,
            period_start=draft.period_start,
            period_end=draft.period_end,
            months_covered=draft.months_covered,
            proration_factor=draft.proration_factor.quantize(
                FACTOR_QUANTUM, rounding=ROUND_HALF_EVEN
            ),
            meter_start=draft.meter_start,
            meter_end=draft.meter_end,
            cost_per_kwh=draft.rates.cost_per_kwh,
            room_price=charges.room_price,
            usage_cost=charges.usage_cost,
            water_fee=charges.water_fee,
            trash_fee=charges.trash_fee,
            additional_cost=charges.additional_cost,
            total_amount=charges.total_amount,
        )

    @staticmethod
    def list_bills(
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        room_id: Optional[str] = None,
        tenant_id: Optional[str] = None,
        property_id: Optional[str] = None,
        is_paid: Optional[bool] = None,
        period_from: Optional[date] = None,
        period_to: Optional[date] = None,
    ) -> Tuple[Iterable[models.Bill], int]:
        query = db.query(models.Bill).options(
            selectinload(models.Bill.charges), selectinload(models.Bill.payments)
        )

        if room_id:
            query = query.filter(models.Bill.room_id == room_id)
        if tenant_id:
            query = query.filter(models.Bill.tenant_id == tenant_id)
        if property_id:
            query = query.join(models.Room, models.Room.id == models.Bill.room_id).filter(
                models.Room.property_id == property_id
            )
        if is_paid is not None:
            query = query.filter(models.Bill.is_paid.is_(is_paid))
        if period_from:
            query = query.filter(models.Bill.period_end >= period_from)
        if period_to:
            query = query.filter(models.Bill.period_start <= period_to)

        total = query.count()
        items = (
            query.order_by(models.Bill.period_start.desc(), models.Bill.billing_code.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @classmethod
    def get_bill(cls, db: Session, bill_id: str) -> models.Bill:
        return cls._get_bill(db, bill_id)

    @classmethod
    def mark_bill_paid(cls, db: Session, bill_id: str) -> models.Bill:
        bill = cls._get_bill(db, bill_id, for_update=True)
        if bill.is_paid:
            raise InvalidStateError("Bill is already paid", context={"bill_id": bill.id})
        bill.is_paid = True
        bill.paid_at = _now()
        db.add(bill)
        db.commit()
        db.refresh(bill)
        LOGGER.info("Bill %s marked as paid", bill.billing_code)
        return bill

    @classmethod
    def delete_bill(cls, db: Session, bill_id: str) -> None:
        bill = cls._get_bill(db, bill_id, for_update=True)
        cls._ensure_unpaid(bill, "delete")
        code = bill.billing_code
        db.delete(bill)
        db.commit()
        LOGGER.info("Bill %s deleted", code)

    @classmethod
    def update_bill(cls, db: Session, bill_id: str, data: schemas.BillUpdate) -> models.Bill:
        bill = cls._get_bill(db, bill_id, for_update=True)
        cls._ensure_unpaid(bill)
        updates = data.model_dump(exclude_unset=True)
        if "notes" in updates:
            bill.notes = updates["notes"]
        db.add(bill)
        db.commit()
        db.refresh(bill)
        return bill

    @classmethod
    def update_bill_period(
        cls, db: Session, bill_id: str, period_start: date, period_end: date
    ) -> models.Bill:
        """Move a bill to a new range and recompute its rent and total.

        Usage, water, trash and the meter values already on the bill are kept.
        """

        bill = cls._get_bill(db, bill_id, for_update=True)
        cls._ensure_unpaid(bill)
        if period_start > period_end:
            raise ValidationError("period_start must not be after period_end")

        room = cls._get_room(db, bill.room_id, for_update=True)
        cls.ensure_no_overlap(db, room.id, period_start, period_end, exclude_bill_id=bill.id)

        months = calculate_months_covered(period_start, period_end)
        if months <= 0:
            raise ValidationError("The billing period is too short to bill")
        factor = compute_proration_factor(room.move_in_date, period_start, period_end)
        room_price = calculate_rent(room.price, months, factor)
        total = cls._projected_total(bill, room_price=room_price)

        bill.period_start = period_start
        bill.period_end = period_end
        bill.months_covered = months
        bill.proration_factor = factor.quantize(FACTOR_QUANTUM, rounding=ROUND_HALF_EVEN)
        bill.room_price = room_price
        bill.total_amount = total

        try:
            db.add(bill)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            ObservabilityService.record_rejection(
                db, "bills.update_period", "duplicate room period", labels={"bill_id": bill_id}
            )
            raise ConflictError(
                "A bill already exists for this room and period",
                context={"bill_id": bill_id},
            ) from exc
        db.refresh(bill)
        LOGGER.info(
            "Bill %s moved to %s - %s", bill.billing_code, bill.period_start, bill.period_end
        )
        return bill

    @staticmethod
    def _projected_total(
        bill: models.Bill,
        *,
        room_price: Optional[Decimal] = None,
        additional_cost: Optional[Decimal] = None,
    ) -> Decimal:
        """Return the total the bill would carry after the given change.

        A bill's total may never fall below what has already been paid on it.
        """

        room_price = quantize_money(bill.room_price if room_price is None else room_price)
        if additional_cost is None:
            additional_cost = bill.additional_cost
        total = (
            room_price
            + quantize_money(bill.usage_cost)
            + quantize_money(bill.water_fee)
            + quantize_money(bill.trash_fee)
            + quantize_money(additional_cost)
        )
        if total < Decimal(bill.paid_amount or 0):
            raise ValidationError(
                "Bill total cannot drop below the amount already paid",
                context={"bill_id": bill.id, "paid_amount": str(bill.paid_amount)},
            )
        return total

    @staticmethod
    def _sum_charges(charges: Iterable[models.BillCharge], *extra: Decimal) -> Decimal:
        total = sum((Decimal(charge.total) for charge in charges), Decimal("0"))
        return quantize_money(total + sum(extra, Decimal("0")))

    @staticmethod
    def _find_charge(bill: models.Bill, charge_id: str) -> models.BillCharge:
        for charge in bill.charges:
            if charge.id == charge_id:
                return charge
        raise NotFoundError(
            "Charge not found", context={"bill_id": bill.id, "charge_id": charge_id}
        )

    @classmethod
    def add_charge(
        cls, db: Session, bill_id: str, data: schemas.BillChargeCreate
    ) -> models.Bill:
        bill = cls._get_bill(db, bill_id, for_update=True)
        cls._ensure_unpaid(bill)
        line_total = calculate_charge_line_total(data.quantity, data.unit_price, data.discount)
        additional = cls._sum_charges(bill.charges, line_total)
        total = cls._projected_total(bill, additional_cost=additional)

        bill.charges.append(
            models.BillCharge(
                name=data.name,
                quantity=data.quantity,
                unit_price=data.unit_price,
                discount=data.discount,
                total=line_total,
                notes=data.notes,
            )
        )
        bill.additional_cost = additional
        bill.total_amount = total
        db.add(bill)
        db.commit()
        db.refresh(bill)
        return bill

    @classmethod
    def update_charge(
        cls, db: Session, bill_id: str, charge_id: str, data: schemas.BillChargeUpdate
    ) -> models.Bill:
        bill = cls._get_bill(db, bill_id, for_update=True)
        cls._ensure_unpaid(bill)
        charge = cls._find_charge(bill, charge_id)

        updates = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field == "notes"
        }
        line_total = calculate_charge_line_total(
            updates.get("quantity", charge.quantity),
            updates.get("unit_price", charge.unit_price),
            updates.get("discount", charge.discount),
        )
        others = [item for item in bill.charges if item.id != charge.id]
        additional = cls._sum_charges(others, line_total)
        total = cls._projected_total(bill, additional_cost=additional)

        for field, value in updates.items():
            setattr(charge, field, value)
        charge.total = line_total
        bill.additional_cost = additional
        bill.total_amount = total
        db.add(bill)
        db.commit()
        db.refresh(bill)
        return bill

    @classmethod
    def delete_charge(cls, db: Session, bill_id: str, charge_id: str) -> models.Bill:
        bill = cls._get_bill(db, bill_id, for_update=True)
        cls._ensure_unpaid(bill)
        charge = cls._find_charge(bill, charge_id)
        additional = cls._sum_charges(item for item in bill.charges if item.id != charge.id)
        total = cls._projected_total(bill, additional_cost=additional)

        bill.charges.remove(charge)
        bill.additional_cost = additional
        bill.total_amount = total
        db.add(bill)
        db.commit()
        db.refresh(bill)
        return bill

    @staticmethod
    def count_bills_for_room(db: Session, room_id: str) -> int:
        return (
            db.query(func.count(models.Bill.id)).filter(models.Bill.room_id == room_id).scalar()
            or 0
        )

    @staticmethod
    def paid_bills_for_reading(db: Session, reading_id: str) -> Sequence[models.Bill]:
        return (
            db.query(models.Bill)
            .filter(models.Bill.meter_reading_id == reading_id, models.Bill.is_paid.is_(True))
            .all()
        )
