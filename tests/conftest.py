"""Shared fixtures for the installment engine test suite."""

from datetime import date
from decimal import Decimal

import pytest

from installment_plan.config import reset_settings
from installment_plan.data_models import ScheduleParameters


@pytest.fixture(autouse=True)
def reset_settings_cache(monkeypatch):
    """Clears cached settings and engine env vars before each test for isolation."""
    for name in ("INSTALLMENT_MAX_COUNT", "INSTALLMENT_BALANCE_TOLERANCE", "INSTALLMENT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def params():
    """100.00 over three monthly installments starting 2024-01-10."""
    return ScheduleParameters(
        target_balance=Decimal("100.00"),
        first_due_date=date(2024, 1, 10),
        count=3,
        periodicity="monthly",
    )
