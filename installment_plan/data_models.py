"""Data models for the installment schedule engine.

This module defines the dataclasses shared by every layer of the engine: the
installments that make up a schedule, the parameters a schedule is generated
from, the findings the validator reports and the result objects returned by
the editor. Installments and parameters are frozen; every edit produces a new
object via ``dataclasses.replace`` so callers can keep the previous state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import ClassVar, List, Optional, Tuple

from .utils import to_money


class Origin(str, Enum):
    """Who set the amount/date of an installment."""

    AUTO = "auto"
    MANUAL = "manual"


class PaymentStatus(str, Enum):
    """Lifecycle owned by the payment subsystem. Only ``pending`` is editable."""

    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class Periodicity(str, Enum):
    MONTHLY = "monthly"
    BIWEEKLY = "biweekly"
    WEEKLY = "weekly"


@dataclass(frozen=True)
class Installment:
    """A single scheduled payment.

    Attributes
    ----------
    sequence_number: int
        1-based position in due-date order. Reassigned after every structural
        change (add, remove, re-date).
    due_date: date
        Calendar date the installment falls due.
    amount: Decimal
        Amount in currency units, rounded to cents.
    origin: Origin
        ``MANUAL`` installments were edited by a user and are never touched by
        regeneration or redistribution.
    payment_status: PaymentStatus
        ``PAID`` and ``CANCELLED`` installments are frozen inputs.
    """

    sequence_number: int
    due_date: date
    amount: Decimal
    origin: Origin = Origin.AUTO
    payment_status: PaymentStatus = PaymentStatus.PENDING

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_money(self.amount))

    @property
    def is_manual(self) -> bool:
        return self.origin == Origin.MANUAL

    @property
    def is_frozen(self) -> bool:
        return self.payment_status != PaymentStatus.PENDING


@dataclass(frozen=True)
class ScheduleParameters:
    """Inputs for one generation call.

    ``target_balance`` is the amount still to be split into installments, i.e.
    the contract value with any down payment already subtracted. Use
    :meth:`from_contract` to build it from the contract figures.

    Construction fails fast on caller bugs (negative count, missing first due
    date, unknown periodicity). Business irregularities such as a zero balance
    are left to the validator.
    """

    target_balance: Decimal
    first_due_date: date
    count: int
    periodicity: Periodicity = Periodicity.MONTHLY
    contract_start_date: Optional[date] = None

    def __post_init__(self) -> None:
        if self.first_due_date is None:
            raise ValueError("first_due_date is required")
        if self.count is None or self.count < 0:
            raise ValueError(f"Installment count must not be negative; got {self.count}")
        try:
            periodicity = Periodicity(self.periodicity)
        except ValueError as exc:
            raise ValueError(f"Unknown periodicity: {self.periodicity!r}") from exc
        object.__setattr__(self, "periodicity", periodicity)
        object.__setattr__(self, "target_balance", to_money(self.target_balance))
        if self.contract_start_date is None:
            object.__setattr__(self, "contract_start_date", self.first_due_date)

    @classmethod
    def from_contract(
        cls,
        contract_value: Decimal,
        down_payment: Optional[Decimal],
        first_due_date: date,
        count: int,
        periodicity: Periodicity = Periodicity.MONTHLY,
        contract_start_date: Optional[date] = None,
    ) -> "ScheduleParameters":
        return cls(
            target_balance=Decimal(contract_value) - Decimal(down_payment or 0),
            first_due_date=first_due_date,
            count=count,
            periodicity=periodicity,
            contract_start_date=contract_start_date,
        )


# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Finding:
    """Base class for advisory problems reported alongside a schedule."""

    code: ClassVar[str] = "finding"

    @property
    def message(self) -> str:
        return self.code


@dataclass(frozen=True)
class NonPositiveBalance(Finding):
    target_balance: Decimal

    code: ClassVar[str] = "non_positive_balance"

    @property
    def message(self) -> str:
        return f"Balance to distribute is {self.target_balance:.2f}; nothing to schedule"


@dataclass(frozen=True)
class InstallmentCountOutOfRange(Finding):
    count: int
    maximum: int

    code: ClassVar[str] = "installment_count_out_of_range"

    @property
    def message(self) -> str:
        return f"Installment count {self.count} is outside 1..{self.maximum}"


@dataclass(frozen=True)
class FirstDateBeforeContractStart(Finding):
    first_due_date: date
    contract_start_date: date

    code: ClassVar[str] = "first_date_before_contract_start"

    @property
    def message(self) -> str:
        return (
            f"First installment ({self.first_due_date.isoformat()}) is due before "
            f"the contract start ({self.contract_start_date.isoformat()})"
        )


@dataclass(frozen=True)
class DuplicateDueDate(Finding):
    due_date: date
    sequence_numbers: Tuple[int, ...] = ()

    code: ClassVar[str] = "duplicate_due_date"

    @property
    def message(self) -> str:
        numbers = ", ".join(f"#{n}" for n in self.sequence_numbers)
        return f"Installments {numbers} share the due date {self.due_date.isoformat()}"


@dataclass(frozen=True)
class NonPositiveAmount(Finding):
    sequence_number: int
    amount: Decimal

    code: ClassVar[str] = "non_positive_amount"

    @property
    def message(self) -> str:
        return f"Installment #{self.sequence_number} has a non-positive amount ({self.amount:.2f})"


@dataclass(frozen=True)
class ManualAmountsExceedBalance(Finding):
    manual_total: Decimal
    target_balance: Decimal

    code: ClassVar[str] = "manual_amounts_exceed_balance"

    @property
    def message(self) -> str:
        return (
            f"Manual installments total {self.manual_total:.2f}, "
            f"more than the balance of {self.target_balance:.2f}"
        )


@dataclass(frozen=True)
class BalanceMismatch(Finding):
    expected: Decimal
    actual: Decimal

    code: ClassVar[str] = "balance_mismatch"

    @property
    def difference(self) -> Decimal:
        return self.expected - self.actual

    @property
    def message(self) -> str:
        return (
            f"Installments sum to {self.actual:.2f} but the balance is "
            f"{self.expected:.2f} (difference {self.difference:.2f})"
        )


@dataclass(frozen=True)
class UnknownInstallment(Finding):
    sequence_number: int

    code: ClassVar[str] = "unknown_installment"

    @property
    def message(self) -> str:
        return f"There is no installment #{self.sequence_number}"


@dataclass(frozen=True)
class FrozenInstallment(Finding):
    sequence_number: int
    payment_status: PaymentStatus

    code: ClassVar[str] = "frozen_installment"

    @property
    def message(self) -> str:
        return (
            f"Installment #{self.sequence_number} is {self.payment_status.value} "
            "and cannot be edited"
        )


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EditResult:
    """A proposed next schedule plus everything the validator found in it."""

    installments: Tuple[Installment, ...]
    findings: List[Finding] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.findings


@dataclass(frozen=True)
class ScheduleSummary:
    """Aggregate figures for a schedule, as shown under the installment table."""

    target_balance: Decimal
    total: Decimal
    pending_total: Decimal
    paid_total: Decimal
    cancelled_total: Decimal
    difference: Decimal
    installment_count: int
    manual_count: int
    overdue_count: int
    first_due_date: Optional[date]
    last_due_date: Optional[date]
