"""Editor façade over the schedule engine.

:class:`ScheduleEditor` exposes the operations a contract form performs on an
installment table. Each operation takes the current installments, never
modifies them, and returns an :class:`EditResult` holding the proposed next
schedule and the validator's findings for it. Edits addressed to a missing or
frozen installment leave the schedule as it was and report why.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .config import Settings, load_settings
from .data_models import (
    EditResult,
    Finding,
    FrozenInstallment,
    Installment,
    Origin,
    ScheduleParameters,
    ScheduleSummary,
    UnknownInstallment,
)
from .engine import generate_schedule, reconcile_balance, sort_and_renumber, summarize_schedule
from .utils import advance, to_money
from .validation import validate_schedule

logger = logging.getLogger(__name__)


class ScheduleEditor:
    """Apply schedule edits for one set of :class:`ScheduleParameters`.

    Parameters
    ----------
    params: ScheduleParameters
        Balance, first due date, count and periodicity of the schedule being
        edited. Build a new editor when any of them change.
    settings: Settings, optional
        Validation limits; defaults to :func:`load_settings`.
    """

    def __init__(self, params: ScheduleParameters, settings: Optional[Settings] = None) -> None:
        self.params = params
        self.settings = settings or load_settings()

    # -- helpers -----------------------------------------------------------

    def validate(self, installments: Sequence[Installment]) -> List[Finding]:
        return validate_schedule(installments, self.params, self.settings)

    def _result(
        self, installments: Iterable[Installment], extra: Sequence[Finding] = ()
    ) -> EditResult:
        installments = tuple(installments)
        findings = list(extra) + self.validate(installments)
        if findings:
            logger.warning(
                "Schedule has %d finding(s): %s",
                len(findings),
                ", ".join(f.code for f in findings),
            )
        return EditResult(installments=installments, findings=findings)

    def _locate(
        self, installments: Sequence[Installment], sequence_number: int
    ) -> Tuple[Optional[int], Optional[Finding]]:
        for idx, inst in enumerate(installments):
            if inst.sequence_number == sequence_number:
                if inst.is_frozen:
                    return None, FrozenInstallment(sequence_number, inst.payment_status)
                return idx, None
        return None, UnknownInstallment(sequence_number)

    def _edit_one(
        self, installments: Sequence[Installment], sequence_number: int, resort: bool, **changes
    ) -> EditResult:
        idx, problem = self._locate(installments, sequence_number)
        if problem is not None:
            logger.info("Rejected edit of installment #%d: %s", sequence_number, problem.code)
            return self._result(installments, [problem])
        updated = list(installments)
        updated[idx] = replace(updated[idx], **changes)
        return self._result(sort_and_renumber(updated) if resort else updated)

    # -- operations --------------------------------------------------------

    def regenerate(self, installments: Sequence[Installment] = ()) -> EditResult:
        """Generate, reconcile and validate, keeping manual and frozen installments."""
        logger.info(
            "Regenerating %d %s installment(s) from %s for %s",
            self.params.count,
            self.params.periodicity.value,
            self.params.first_due_date.isoformat(),
            self.params.target_balance,
        )
        return self._result(generate_schedule(self.params, installments))

    def set_manual_date(
        self, installments: Sequence[Installment], sequence_number: int, new_date: date
    ) -> EditResult:
        """Pin an installment to ``new_date``. Amounts are not rebalanced."""
        if new_date is None:
            raise ValueError("new_date is required")
        return self._edit_one(
            installments, sequence_number, resort=True, due_date=new_date, origin=Origin.MANUAL
        )

    def set_manual_amount(
        self,
        installments: Sequence[Installment],
        sequence_number: int,
        new_amount: Union[Decimal, int, str],
    ) -> EditResult:
        """Pin an installment to ``new_amount``.

        The other installments keep their amounts; call :meth:`redistribute`
        to spread the difference over the automatic ones.
        """
        return self._edit_one(
            installments,
            sequence_number,
            resort=False,
            amount=to_money(new_amount),
            origin=Origin.MANUAL,
        )

    def pin(self, installments: Sequence[Installment], sequence_number: int) -> EditResult:
        return self._edit_one(installments, sequence_number, resort=False, origin=Origin.MANUAL)

    def unpin(self, installments: Sequence[Installment], sequence_number: int) -> EditResult:
        """Hand an installment back to the engine; it changes on the next redistribute."""
        return self._edit_one(installments, sequence_number, resort=False, origin=Origin.AUTO)

    def redistribute(self, installments: Sequence[Installment]) -> EditResult:
        """Spread what the manual installments leave of the balance over the automatic ones."""
        logger.info("Redistributing %s over the automatic installments", self.params.target_balance)
        return self._result(reconcile_balance(installments, self.params.target_balance))

    def add_installment(
        self,
        installments: Sequence[Installment],
        due_date: Optional[date] = None,
        amount: Union[Decimal, int, str] = Decimal("0.00"),
    ) -> EditResult:
        """Append a manual installment and renumber.

        Without ``due_date`` the installment falls one period after the latest
        due date in the schedule, or on the first due date when it is empty.
        """
        if due_date is None:
            if installments:
                latest = max(inst.due_date for inst in installments)
                due_date = advance(latest, 1, self.params.periodicity)
            else:
                due_date = self.params.first_due_date
        added = Installment(
            sequence_number=len(installments) + 1,
            due_date=due_date,
            amount=amount,
            origin=Origin.MANUAL,
        )
        logger.info("Adding manual installment on %s for %s", due_date.isoformat(), added.amount)
        return self._result(sort_and_renumber(list(installments) + [added]))

    def remove_installment(
        self, installments: Sequence[Installment], sequence_number: int
    ) -> EditResult:
        idx, problem = self._locate(installments, sequence_number)
        if problem is not None:
            return self._result(installments, [problem])
        logger.info("Removing installment #%d", sequence_number)
        remaining = [inst for pos, inst in enumerate(installments) if pos != idx]
        return self._result(sort_and_renumber(remaining))

    def summarize(
        self, installments: Sequence[Installment], today: Optional[date] = None
    ) -> ScheduleSummary:
        return summarize_schedule(installments, self.params.target_balance, today)
