"""Date arithmetic for billing periods: months covered, period ends and proration."""

from __future__ import annotations

from calendar import monthrange
from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Optional, Union

from .errors import ValidationError

MONTHS_QUANTUM = Decimal("0.01")

MonthsInput = Union[int, Decimal, None]


def days_in_month(year: int, month: int) -> int:
    return monthrange(year, month)[1]


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


def normalize_period_key(period_key: str) -> tuple[str, date, date]:
    """Return the normalized ``YYYY-MM`` key and the first and last day of that month."""

    if not period_key:
        raise ValidationError("period is required")

    try:
        year_str, month_str = period_key.split("-", maxsplit=1)
        year = int(year_str)
        month = int(month_str)
    except ValueError as exc:
        raise ValidationError("Invalid period format, expected YYYY-MM") from exc

    if month < 1 or month > 12 or year < 1:
        raise ValidationError("Invalid period format, expected YYYY-MM")

    starts_on = date(year, month, 1)
    ends_on = date(year, month, days_in_month(year, month))
    return f"{year:04d}-{month:02d}", starts_on, ends_on


def period_key_for(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def add_months(value: date, months: int) -> date:
    """Shift ``value`` by whole calendar months, clamping the day to the month length."""

    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, days_in_month(year, month))
    return date(year, month, day)


def calculate_months_covered(period_start: date, period_end: date) -> Decimal:
    """Return the number of months spanned by an inclusive date range.

    The day count is divided by the average length of the distinct calendar
    months the range touches, so February and July ranges are measured against
    their own month lengths instead of a fixed 30-day month.
    """

    if period_start > period_end:
        raise ValidationError("period_start must not be after period_end")

    total_days = inclusive_days(period_start, period_end)

    month_lengths: list[int] = []
    cursor = date(period_start.year, period_start.month, 1)
    while cursor <= period_end:
        month_lengths.append(days_in_month(cursor.year, cursor.month))
        cursor = add_months(cursor, 1)

    average = Decimal(sum(month_lengths)) / Decimal(len(month_lengths))
    return (Decimal(total_days) / average).quantize(MONTHS_QUANTUM, rounding=ROUND_HALF_EVEN)


def calculate_period_end_date(period_start: date, months_covered: MonthsInput) -> date:
    """Return ``period_start`` advanced by ``months_covered`` calendar months.

    The end date keeps the start's day of month (15 Jan + 1 month = 15 Feb).
    Only whole months can be turned into an end date; a fractional count
    would bill days the stored range does not cover.
    """

    return add_months(period_start, _whole_months(months_covered))


def compute_proration_factor(
    move_in_date: Optional[date], period_start: date, period_end: date
) -> Decimal:
    """Return the share of the period the tenant occupied the room.

    The factor is 1 unless the move-in date falls inside the period. Otherwise
    it is the inclusive days from move-in through ``period_end`` over the
    inclusive days of the period (17/31 for a 15 January move-in billed for
    January).
    """

    if period_start > period_end:
        raise ValidationError("period_start must not be after period_end")
    if move_in_date is None or not period_start <= move_in_date <= period_end:
        return Decimal(1)

    occupied = inclusive_days(move_in_date, period_end)
    return Decimal(occupied) / Decimal(inclusive_days(period_start, period_end))


def date_ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """Inclusive ranges overlap when each starts no later than the other ends."""

    return start1 <= end2 and end1 >= start2


def resolve_period(
    *,
    period: Optional[str] = None,
    period_end_key: Optional[str] = None,
    period_start: Optional[date] = None,
    period_end: Optional[date] = None,
    months_covered: MonthsInput = None,
) -> tuple[date, date, Decimal]:
    """Turn a bill request's period fields into ``(start, end, months_covered)``.

    Either a legacy ``YYYY-MM`` ``period`` (optionally with a ``YYYY-MM``
    ``period_end_key``) or an explicit ``period_start`` must be given. Legacy
    keys always cover whole calendar months.
    """

    months = _coerce_months(months_covered) if months_covered is not None else None
    if months is not None and months <= 0:
        raise ValidationError("months_covered must be greater than zero")

    if period_start is None:
        if not period:
            raise ValidationError("Either period or period_start is required")

        _, start, _ = normalize_period_key(period)
        if period_end_key:
            _, _, end = normalize_period_key(period_end_key)
            if end < start:
                raise ValidationError("period_end must not be before period")
            key_months = _month_distance(start, end) + 1
            if months is not None and months != key_months:
                raise ValidationError(
                    f"months_covered ({months}) does not match the {key_months} month(s) "
                    f"from {period} to {period_end_key}"
                )
            months = Decimal(key_months)
        else:
            whole_months = _whole_months(months)
            months = Decimal(whole_months)
            last_month = add_months(start, whole_months - 1)
            end = date(last_month.year, last_month.month, days_in_month(last_month.year, last_month.month))
        return start, end, months.quantize(MONTHS_QUANTUM, rounding=ROUND_HALF_EVEN)

    if period_end is None:
        if months is None:
            months = Decimal(1)
        end = calculate_period_end_date(period_start, months)
    else:
        end = period_end
        if end < period_start:
            raise ValidationError("period_end must not be before period_start")
        if months is None:
            months = max(calculate_months_covered(period_start, end), MONTHS_QUANTUM)

    return period_start, end, months.quantize(MONTHS_QUANTUM, rounding=ROUND_HALF_EVEN)


def _month_distance(start: date, end: date) -> int:
    return (end.year - start.year) * 12 + (end.month - start.month)


def _whole_months(value: MonthsInput) -> int:
    months = _coerce_months(value)
    if months < 1 or months != months.to_integral_value():
        raise ValidationError(
            "months_covered must be a whole number of months when the period end is derived"
        )
    return int(months)


def _coerce_months(value: MonthsInput) -> Decimal:
    if value is None:
        return Decimal(1)
    try:
        months = Decimal(str(value))
    except ArithmeticError as exc:
        raise ValidationError("months_covered must be numeric") from exc
    if not months.is_finite():
        raise ValidationError("months_covered must be numeric")
    return months
