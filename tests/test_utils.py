"""Tests for date rolling, money rounding and input parsing."""

from datetime import date
from decimal import Decimal

import pytest

from installment_plan.data_models import Periodicity
from installment_plan.utils import (
    add_months,
    advance,
    decimal_from_str,
    floor_money,
    parse_amount,
    parse_date,
    to_money,
)


# =============================================================================
# DATE ROLLING
# =============================================================================

@pytest.mark.parametrize(
    "start, months, expected",
    [
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2023, 1, 31), 1, date(2023, 2, 28)),
        (date(2024, 1, 31), 2, date(2024, 3, 31)),
        (date(2024, 1, 31), 3, date(2024, 4, 30)),
        (date(2024, 11, 30), 3, date(2025, 2, 28)),
        (date(2024, 12, 15), 1, date(2025, 1, 15)),
        (date(2024, 3, 31), -1, date(2024, 2, 29)),
    ],
)
def test_add_months_clamps_to_month_end(start, months, expected):
    assert add_months(start, months) == expected


def test_monthly_rollover_is_not_compounded():
    base = date(2024, 1, 31)
    dates = [advance(base, i, Periodicity.MONTHLY) for i in range(3)]
    assert dates == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]


def test_weekly_and_biweekly_step_in_days():
    base = date(2024, 1, 1)
    assert advance(base, 3, Periodicity.WEEKLY) == date(2024, 1, 22)
    assert advance(base, 2, "biweekly") == date(2024, 1, 29)
    assert advance(base, 0, "weekly") == base


def test_advance_rejects_unknown_periodicity():
    with pytest.raises(ValueError):
        advance(date(2024, 1, 1), 1, "yearly")


# =============================================================================
# MONEY
# =============================================================================

def test_to_money_rounds_half_up_to_cents():
    assert to_money("10.005") == Decimal("10.01")
    assert to_money(0.1 + 0.2) == Decimal("0.30")
    assert to_money(7) == Decimal("7.00")


@pytest.mark.parametrize("value", ["NaN", "Infinity", Decimal("1e40"), Decimal("-Infinity")])
def test_to_money_rejects_non_finite_and_oversized_values(value):
    with pytest.raises(ValueError):
        to_money(value)


def test_floor_money_rounds_towards_negative_infinity():
    assert floor_money(Decimal("33.339")) == Decimal("33.33")
    assert floor_money(Decimal("-3.331")) == Decimal("-3.34")


# =============================================================================
# PARSING
# =============================================================================

def test_parse_amount_accepts_suffixes_and_separators():
    assert parse_amount("12k") == Decimal("12000")
    assert parse_amount("1.5m") == Decimal("1500000")
    assert parse_amount("1,500.50") == Decimal("1500.50")


def test_parse_amount_rejects_garbage():
    with pytest.raises(ValueError):
        parse_amount("abc")


def test_decimal_from_str_rejects_empty():
    with pytest.raises(ValueError):
        decimal_from_str("")


@pytest.mark.parametrize("value", ["NaN", "nan", "Infinity", "-inf"])
def test_decimal_from_str_rejects_non_finite(value):
    with pytest.raises(ValueError):
        decimal_from_str(value)


def test_parse_date():
    assert parse_date(" 2024-02-29 ") == date(2024, 2, 29)
    with pytest.raises(ValueError):
        parse_date("2024-02-30")
    with pytest.raises(ValueError):
        parse_date("02/03/2024")
