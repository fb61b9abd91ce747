"""Core calculation engine for installment schedules.

This module implements the two algorithms behind the schedule editor:
generating a fresh schedule from :class:`ScheduleParameters` while keeping the
installments a user pinned by hand, and reconciling the automatic installment
amounts so the pending total matches the balance to the cent. Paid and
cancelled installments are carried through untouched by both.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .data_models import Installment, Origin, PaymentStatus, ScheduleParameters, ScheduleSummary
from .utils import advance, floor_money, to_money

logger = logging.getLogger(__name__)


def sort_and_renumber(installments: Iterable[Installment]) -> Tuple[Installment, ...]:
    """Sort by due date (stable, so ties keep their relative order) and number 1..N."""
    ordered = sorted(installments, key=lambda inst: inst.due_date)
    return tuple(
        inst if inst.sequence_number == number else replace(inst, sequence_number=number)
        for number, inst in enumerate(ordered, start=1)
    )


def split_frozen(installments: Iterable[Installment]) -> Tuple[List[Installment], List[Installment]]:
    """Return ``(pending, frozen)`` preserving input order."""
    pending: List[Installment] = []
    frozen: List[Installment] = []
    for inst in installments:
        (frozen if inst.is_frozen else pending).append(inst)
    return pending, frozen


def reconcile_balance(
    installments: Sequence[Installment], target_balance: Decimal
) -> Tuple[Installment, ...]:
    """Recompute automatic amounts so the pending total equals ``target_balance``.

    Manual installments keep their amounts; what is left of the balance is
    split evenly across the automatic ones, rounded down to the cent. The last
    automatic installment in due-date order takes the remainder, so the total is
    reproduced exactly. A negative remainder (manual amounts above the balance)
    is distributed as-is and left for the validator to report.

    Order and numbering of ``installments`` are preserved. Frozen installments
    are returned unchanged and do not count towards the balance.
    """
    target_balance = to_money(target_balance)
    manual_sum = sum(
        (inst.amount for inst in installments if not inst.is_frozen and inst.is_manual),
        Decimal("0"),
    )
    auto_positions = [
        idx for idx, inst in enumerate(installments) if not inst.is_frozen and not inst.is_manual
    ]
    if not auto_positions:
        logger.debug("No automatic installments to reconcile")
        return tuple(installments)

    auto_remainder = target_balance - manual_sum
    auto_count = len(auto_positions)
    base_amount = floor_money(auto_remainder / Decimal(auto_count))
    last_amount = auto_remainder - base_amount * (auto_count - 1)
    # Ties on the due date go to the later position.
    last_position = max(auto_positions, key=lambda idx: (installments[idx].due_date, idx))
    logger.debug(
        "Reconciling %s over %d automatic installments: base %s, last %s",
        auto_remainder,
        auto_count,
        base_amount,
        last_amount,
    )

    result = list(installments)
    for idx in auto_positions:
        amount = last_amount if idx == last_position else base_amount
        if result[idx].amount != amount:
            result[idx] = replace(result[idx], amount=amount)
    return tuple(result)


def generate_schedule(
    params: ScheduleParameters, existing: Sequence[Installment] = ()
) -> Tuple[Installment, ...]:
    """Build a schedule of ``params.count`` pending installments.

    Manual installments of ``existing`` keep the position given by their
    sequence number, not counting frozen rows numbered ahead of them, and are
    kept verbatim; every other position gets a new automatic installment.
    Automatic due dates advance one period per automatic slot only, so pins do
    not consume a step. Manual installments beyond ``params.count`` are kept
    too.

    When ``count`` is below 1 or the balance is not positive there is nothing
    to distribute and ``existing`` is returned unchanged.
    """
    if params.count < 1 or params.target_balance <= 0:
        logger.debug(
            "Skipping generation: count=%d, balance=%s", params.count, params.target_balance
        )
        return tuple(existing)

    pending, frozen = split_frozen(existing)
    frozen_numbers = [inst.sequence_number for inst in frozen]
    manual_by_position: Dict[int, Installment] = {}
    overflow: List[Installment] = []
    for inst in sorted(pending, key=lambda inst: inst.sequence_number):
        if not inst.is_manual:
            continue
        # Frozen rows ahead of a pin do not take up a generated position.
        position = inst.sequence_number - sum(1 for n in frozen_numbers if n < inst.sequence_number)
        if position in manual_by_position:
            overflow.append(inst)
        else:
            manual_by_position[position] = inst

    generated: List[Installment] = []
    auto_index = 0
    for position in range(1, params.count + 1):
        pinned = manual_by_position.pop(position, None)
        if pinned is not None:
            generated.append(pinned)
            continue
        due = advance(params.first_due_date, auto_index, params.periodicity)
        auto_index += 1
        generated.append(
            Installment(
                sequence_number=position,
                due_date=due,
                amount=Decimal("0.00"),
                origin=Origin.AUTO,
            )
        )
    # Pins past the requested count survive regeneration.
    generated.extend(manual_by_position[position] for position in sorted(manual_by_position))
    generated.extend(overflow)

    logger.debug(
        "Generated %d automatic and %d manual installments",
        auto_index,
        len(generated) - auto_index,
    )
    reconciled = reconcile_balance(generated, params.target_balance)
    return sort_and_renumber(list(frozen) + list(reconciled))


def summarize_schedule(
    installments: Iterable[Installment],
    target_balance: Decimal,
    today: Optional[date] = None,
) -> ScheduleSummary:
    """Compute the totals shown under an installment table.

    ``overdue_count`` counts pending installments due strictly before
    ``today`` (defaults to the current date).
    """
    today = today or date.today()
    installments = list(installments)
    totals: Dict[PaymentStatus, Decimal] = {status: Decimal("0.00") for status in PaymentStatus}
    for inst in installments:
        totals[inst.payment_status] += inst.amount
    pending_total = totals[PaymentStatus.PENDING]
    target_balance = to_money(target_balance)
    dates = [inst.due_date for inst in installments]
    return ScheduleSummary(
        target_balance=target_balance,
        total=sum(totals.values(), Decimal("0.00")),
        pending_total=pending_total,
        paid_total=totals[PaymentStatus.PAID],
        cancelled_total=totals[PaymentStatus.CANCELLED],
        difference=target_balance - pending_total,
        installment_count=len(installments),
        manual_count=sum(1 for inst in installments if inst.is_manual),
        overdue_count=sum(
            1 for inst in installments if not inst.is_frozen and inst.due_date < today
        ),
        first_due_date=min(dates) if dates else None,
        last_due_date=max(dates) if dates else None,
    )
