"""Schedule-level checks.

The validator never changes a schedule. It returns a list of findings that
the caller maps to user-facing messages and uses to decide whether to accept
the proposed schedule.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from .config import Settings, load_settings
from .data_models import (
    BalanceMismatch,
    DuplicateDueDate,
    Finding,
    FirstDateBeforeContractStart,
    Installment,
    InstallmentCountOutOfRange,
    ManualAmountsExceedBalance,
    NonPositiveAmount,
    NonPositiveBalance,
    ScheduleParameters,
)


def find_duplicate_dates(installments: Sequence[Installment]) -> List[DuplicateDueDate]:
    by_date: Dict[date, List[int]] = defaultdict(list)
    for inst in installments:
        by_date[inst.due_date].append(inst.sequence_number)
    return [
        DuplicateDueDate(due_date, tuple(numbers))
        for due_date, numbers in sorted(by_date.items())
        if len(numbers) > 1
    ]


def find_non_positive_amounts(installments: Sequence[Installment]) -> List[NonPositiveAmount]:
    return [
        NonPositiveAmount(inst.sequence_number, inst.amount)
        for inst in installments
        if not inst.is_frozen and inst.amount <= 0
    ]


def check_first_date(
    installments: Sequence[Installment], params: ScheduleParameters
) -> Optional[FirstDateBeforeContractStart]:
    """Installment #1 (or the requested first date for an empty schedule) must not precede the contract start."""
    first = min(installments, key=lambda inst: inst.sequence_number, default=None)
    first_date = first.due_date if first is not None else params.first_due_date
    if first_date < params.contract_start_date:
        return FirstDateBeforeContractStart(first_date, params.contract_start_date)
    return None


def check_balance(
    installments: Sequence[Installment], target_balance: Decimal, tolerance: Decimal
) -> List[Finding]:
    pending = [inst for inst in installments if not inst.is_frozen]
    findings: List[Finding] = []
    manual_total = sum((inst.amount for inst in pending if inst.is_manual), Decimal("0.00"))
    if target_balance > 0 and manual_total > target_balance:
        findings.append(ManualAmountsExceedBalance(manual_total, target_balance))
    if target_balance <= 0 and not pending:
        return findings
    actual = sum((inst.amount for inst in pending), Decimal("0.00"))
    if abs(target_balance - actual) > tolerance:
        findings.append(BalanceMismatch(expected=target_balance, actual=actual))
    return findings


def validate_schedule(
    installments: Sequence[Installment],
    params: ScheduleParameters,
    settings: Optional[Settings] = None,
) -> List[Finding]:
    """Return every finding for ``installments`` against ``params``.

    An empty list means the schedule satisfies all invariants.
    """
    settings = settings or load_settings()
    findings: List[Finding] = []

    if params.target_balance <= 0:
        findings.append(NonPositiveBalance(params.target_balance))
    if params.count > settings.max_installments or (
        params.count < 1 and params.target_balance > 0
    ):
        findings.append(InstallmentCountOutOfRange(params.count, settings.max_installments))

    first_date_finding = check_first_date(installments, params)
    if first_date_finding is not None:
        findings.append(first_date_finding)

    findings.extend(find_duplicate_dates(installments))
    findings.extend(find_non_positive_amounts(installments))
    findings.extend(check_balance(installments, params.target_balance, settings.balance_tolerance))
    return findings
