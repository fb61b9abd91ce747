"""Tests for schedule validation findings."""

from datetime import date
from decimal import Decimal

from installment_plan.config import Settings
from installment_plan.data_models import (
    BalanceMismatch,
    DuplicateDueDate,
    FirstDateBeforeContractStart,
    Installment,
    InstallmentCountOutOfRange,
    ManualAmountsExceedBalance,
    NonPositiveAmount,
    NonPositiveBalance,
    Origin,
    PaymentStatus,
    ScheduleParameters,
)
from installment_plan.engine import generate_schedule
from installment_plan.validation import find_duplicate_dates, validate_schedule


def _schedule(*amounts, start=date(2024, 1, 10)):
    return tuple(
        Installment(i, date(start.year, start.month + i - 1, start.day), Decimal(a))
        for i, a in enumerate(amounts, start=1)
    )


def test_clean_schedule_has_no_findings(params):
    schedule = generate_schedule(params)
    assert validate_schedule(schedule, params) == []


def test_duplicate_due_dates_are_grouped():
    schedule = (
        Installment(1, date(2024, 1, 10), Decimal("50.00")),
        Installment(2, date(2024, 1, 10), Decimal("25.00")),
        Installment(3, date(2024, 2, 10), Decimal("25.00")),
    )
    assert find_duplicate_dates(schedule) == [DuplicateDueDate(date(2024, 1, 10), (1, 2))]


def test_first_date_before_contract_start():
    params = ScheduleParameters(
        target_balance=Decimal("100"),
        first_due_date=date(2024, 1, 10),
        count=3,
        contract_start_date=date(2024, 2, 1),
    )
    schedule = generate_schedule(params)

    findings = validate_schedule(schedule, params)

    assert findings == [FirstDateBeforeContractStart(date(2024, 1, 10), date(2024, 2, 1))]


def test_first_date_checked_on_empty_schedule():
    params = ScheduleParameters(
        target_balance=Decimal("0"),
        first_due_date=date(2024, 1, 10),
        count=3,
        contract_start_date=date(2024, 2, 1),
    )
    findings = validate_schedule((), params)
    assert FirstDateBeforeContractStart(date(2024, 1, 10), date(2024, 2, 1)) in findings


def test_non_positive_manual_amount_is_flagged_not_fixed(params):
    schedule = (
        Installment(1, date(2024, 1, 10), Decimal("0.00"), Origin.MANUAL),
        Installment(2, date(2024, 2, 10), Decimal("50.00")),
        Installment(3, date(2024, 3, 10), Decimal("50.00")),
    )
    assert validate_schedule(schedule, params) == [NonPositiveAmount(1, Decimal("0.00"))]


def test_balance_mismatch_beyond_one_cent(params):
    short_by_two = _schedule("33.33", "33.33", "33.32")
    short_by_one = _schedule("33.33", "33.33", "33.33")

    assert validate_schedule(short_by_two, params) == [
        BalanceMismatch(expected=Decimal("100.00"), actual=Decimal("99.98"))
    ]
    assert validate_schedule(short_by_one, params) == []


def test_manual_amounts_above_balance(params):
    schedule = (
        Installment(1, date(2024, 1, 10), Decimal("150.00"), Origin.MANUAL),
        Installment(2, date(2024, 2, 10), Decimal("-50.00")),
    )

    findings = validate_schedule(schedule, params)

    assert ManualAmountsExceedBalance(Decimal("150.00"), Decimal("100.00")) in findings
    assert NonPositiveAmount(2, Decimal("-50.00")) in findings
    assert not any(isinstance(f, BalanceMismatch) for f in findings)


def test_non_positive_balance():
    params = ScheduleParameters(
        target_balance=Decimal("0"), first_due_date=date(2024, 1, 10), count=3
    )
    assert validate_schedule((), params) == [NonPositiveBalance(Decimal("0.00"))]


def test_count_out_of_range():
    too_many = ScheduleParameters(
        target_balance=Decimal("100"), first_due_date=date(2024, 1, 10), count=13
    )
    none_requested = ScheduleParameters(
        target_balance=Decimal("100"), first_due_date=date(2024, 1, 10), count=0
    )
    settings = Settings(max_installments=12)

    assert InstallmentCountOutOfRange(13, 12) in validate_schedule(
        generate_schedule(too_many), too_many, settings
    )
    findings = validate_schedule((), none_requested, settings)
    assert InstallmentCountOutOfRange(0, 12) in findings
    assert BalanceMismatch(Decimal("100.00"), Decimal("0.00")) in findings


def test_default_maximum_is_120():
    params = ScheduleParameters(
        target_balance=Decimal("1000"), first_due_date=date(2024, 1, 10), count=121
    )
    assert validate_schedule(generate_schedule(params), params) == [
        InstallmentCountOutOfRange(121, 120)
    ]


def test_frozen_rows_are_excluded_from_amount_checks(params):
    schedule = (
        Installment(1, date(2024, 1, 10), Decimal("0.00"), payment_status=PaymentStatus.CANCELLED),
        Installment(2, date(2024, 2, 10), Decimal("80.00"), payment_status=PaymentStatus.PAID),
        Installment(3, date(2024, 3, 10), Decimal("100.00")),
    )
    assert validate_schedule(schedule, params) == []


def test_no_duplicates_for_monthly_schedule_with_distinct_pins():
    params = ScheduleParameters(
        target_balance=Decimal("1200"), first_due_date=date(2024, 1, 31), count=12
    )
    pins = [
        Installment(4, date(2024, 4, 15), Decimal("150.00"), Origin.MANUAL),
        Installment(9, date(2024, 9, 1), Decimal("50.00"), Origin.MANUAL),
    ]

    schedule = generate_schedule(params, pins)

    assert find_duplicate_dates(schedule) == []
    assert validate_schedule(schedule, params) == []


def test_finding_messages_are_readable():
    finding = BalanceMismatch(expected=Decimal("100.00"), actual=Decimal("99.98"))
    assert finding.code == "balance_mismatch"
    assert "99.98" in finding.message
    assert finding.difference == Decimal("0.02")
