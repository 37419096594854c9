from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from backend.app.services.billing_periods import (
    add_months,
    calculate_months_covered,
    calculate_period_end_date,
    compute_proration_factor,
    date_ranges_overlap,
    normalize_period_key,
    resolve_period,
)
from backend.app.services.errors import ValidationError


def test_normalize_period_key_returns_month_bounds():
    key, starts_on, ends_on = normalize_period_key("2024-2")

    assert key == "2024-02"
    assert starts_on == date(2024, 2, 1)
    assert ends_on == date(2024, 2, 29)


@pytest.mark.parametrize("raw", ["2025/01", "2025-13", "2025-00", "abc", ""])
def test_normalize_period_key_rejects_malformed_keys(raw):
    with pytest.raises(ValidationError):
        normalize_period_key(raw)


def test_add_months_clamps_day_to_shorter_month():
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2026, 11, 15), 3) == date(2027, 2, 15)


def test_calculate_period_end_date_keeps_day_of_month():
    assert calculate_period_end_date(date(2026, 1, 15), 1) == date(2026, 2, 15)
    assert calculate_period_end_date(date(2026, 2, 1), 3) == date(2026, 5, 1)


def test_calculate_period_end_date_requires_a_whole_month():
    with pytest.raises(ValidationError):
        calculate_period_end_date(date(2026, 1, 1), Decimal("0.5"))


def test_calculate_months_covered_for_full_calendar_months():
    assert calculate_months_covered(date(2026, 1, 1), date(2026, 1, 31)) == Decimal("1.00")
    assert calculate_months_covered(date(2026, 2, 1), date(2026, 2, 28)) == Decimal("1.00")
    assert calculate_months_covered(date(2026, 1, 1), date(2026, 3, 31)) == Decimal("3.00")


def test_calculate_months_covered_for_half_month():
    # 15 days over a 30-day month
    assert calculate_months_covered(date(2026, 4, 1), date(2026, 4, 15)) == Decimal("0.50")


def test_calculate_months_covered_rejects_inverted_range():
    with pytest.raises(ValidationError):
        calculate_months_covered(date(2026, 2, 1), date(2026, 1, 1))


def test_proration_factor_for_mid_month_move_in():
    factor = compute_proration_factor(date(2026, 1, 15), date(2026, 1, 1), date(2026, 1, 31))

    assert factor == Decimal(17) / Decimal(31)


def test_proration_factor_is_one_outside_the_period():
    start, end = date(2026, 2, 1), date(2026, 2, 28)

    assert compute_proration_factor(None, start, end) == Decimal(1)
    assert compute_proration_factor(date(2026, 1, 15), start, end) == Decimal(1)
    assert compute_proration_factor(date(2026, 3, 1), start, end) == Decimal(1)


def test_proration_factor_on_first_day_is_one():
    factor = compute_proration_factor(date(2026, 1, 1), date(2026, 1, 1), date(2026, 1, 31))

    assert factor == Decimal(1)


def test_proration_factor_over_several_months_uses_the_whole_period():
    # January through March 2026 is 90 days; 15 January leaves 76 of them.
    factor = compute_proration_factor(date(2026, 1, 15), date(2026, 1, 1), date(2026, 3, 31))

    assert factor == Decimal(76) / Decimal(90)
    assert 0 < factor <= 1


def test_date_ranges_overlap_is_inclusive():
    assert date_ranges_overlap(date(2026, 1, 1), date(2026, 1, 31), date(2026, 1, 31), date(2026, 2, 28))
    assert not date_ranges_overlap(
        date(2026, 1, 1), date(2026, 1, 31), date(2026, 2, 1), date(2026, 2, 28)
    )


def test_resolve_period_from_legacy_key():
    start, end, months = resolve_period(period="2026-01")

    assert (start, end, months) == (date(2026, 1, 1), date(2026, 1, 31), Decimal("1.00"))


def test_resolve_period_from_legacy_key_range():
    start, end, months = resolve_period(period="2026-01", period_end_key="2026-03")

    assert start == date(2026, 1, 1)
    assert end == date(2026, 3, 31)
    assert months == Decimal("3.00")


def test_resolve_period_from_legacy_key_with_months():
    start, end, months = resolve_period(period="2026-11", months_covered=2)

    assert start == date(2026, 11, 1)
    assert end == date(2026, 12, 31)
    assert months == Decimal("2.00")


def test_resolve_period_from_explicit_start_only():
    start, end, months = resolve_period(period_start=date(2026, 2, 1), months_covered=3)

    assert start == date(2026, 2, 1)
    assert end == date(2026, 5, 1)
    assert months == Decimal("3.00")


def test_resolve_period_from_explicit_range_derives_months():
    start, end, months = resolve_period(
        period_start=date(2026, 1, 1), period_end=date(2026, 2, 28)
    )

    assert (start, end) == (date(2026, 1, 1), date(2026, 2, 28))
    assert months == Decimal("2.00")


def test_resolve_period_requires_some_period():
    with pytest.raises(ValidationError):
        resolve_period()


def test_resolve_period_rejects_end_before_start():
    with pytest.raises(ValidationError):
        resolve_period(period_start=date(2026, 3, 1), period_end=date(2026, 2, 1))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"period_start": date(2026, 1, 1), "months_covered": Decimal("1.5")},
        {"period": "2026-01", "months_covered": Decimal("2.25")},
        {"period": "2026-01", "period_end_key": "2026-03", "months_covered": 1},
        {"period": "2026-01", "period_end_key": "2026-02", "months_covered": Decimal("2.5")},
    ],
)
def test_resolve_period_rejects_months_that_disagree_with_the_range(kwargs):
    with pytest.raises(ValidationError):
        resolve_period(**kwargs)


def test_resolve_period_accepts_integral_decimal_months():
    start, end, months = resolve_period(period="2026-01", period_end_key="2026-03", months_covered=Decimal("3.00"))

    assert (start, end, months) == (date(2026, 1, 1), date(2026, 3, 31), Decimal("3.00"))
    assert calculate_period_end_date(date(2026, 1, 31), Decimal("1.0")) == date(2026, 2, 28)
