"""Utility functions for the installment engine.

This module provides the calendar arithmetic used to lay out due dates, the
rounding helpers that keep money at cent precision and helpers for parsing
user input into Python data types. It uses Python's ``calendar`` module to
find month lengths.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

CENT = Decimal("0.01")

_PERIOD_DAYS = {
    "weekly": 7,
    "biweekly": 14,
}


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29). The clamp is always
    computed from ``dt`` itself, so Jan 31 plus two months is Mar 31.
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def advance(base_date: date, period_index: int, periodicity) -> date:
    """Return the due date ``period_index`` periods after ``base_date``.

    Parameters
    ----------
    base_date: date
        Due date of the first installment of the series.
    period_index: int
        Number of periods to move forward (0 returns ``base_date``).
    periodicity: Periodicity or str
        ``"monthly"``, ``"biweekly"`` or ``"weekly"``.

    Raises
    ------
    ValueError
        If ``periodicity`` is not one of the supported values.
    """
    key = getattr(periodicity, "value", periodicity)
    if key == "monthly":
        return add_months(base_date, period_index)
    if key in _PERIOD_DAYS:
        return base_date + timedelta(days=_PERIOD_DAYS[key] * period_index)
    raise ValueError(f"Unknown periodicity: {periodicity!r}")


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Round a value to cents (half up). Floats go through ``str`` first."""
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"Not a representable money amount: {value}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a representable money amount: {value}")
    return amount


def floor_money(value: Decimal) -> Decimal:
    """Round a value down (towards negative infinity) to cents."""
    return value.quantize(CENT, rounding=ROUND_FLOOR)


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a ``date``.

    Raises
    ------
    ValueError
        If the string is not a valid ISO calendar date.
    """
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {value}") from exc


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails or the value is not
    finite (``NaN``, ``Infinity``).
    """
    try:
        cleaned = str(value).replace(",", "").strip()
        result = Decimal(cleaned)
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("5000.50") and shorthand with ``k``/``m`` suffixes
    (e.g., "12k" meaning 12_000). Returns a ``Decimal``.
    """
    value = str(value).strip().lower().replace(",", "")
    factor = Decimal(1)
    if value.endswith("k"):
        factor = Decimal(1_000)
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal(1_000_000)
        value = value[:-1]
    return decimal_from_str(value) * factor
