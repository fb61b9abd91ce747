"""Output helpers for the installment engine.

This module provides simple functions to render installment schedules,
their totals and any validation findings in a tabular text format using
``click.echo`` so output plays well with the CLI test runner.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import click

from .data_models import Finding, Installment, ScheduleSummary


def print_summary(summary: ScheduleSummary) -> None:
    """Print schedule totals in a human-readable format."""
    click.echo("Summary")
    click.echo("-" * 72)
    click.echo(f"Balance to schedule : {summary.target_balance:.2f}")
    click.echo(f"Pending total       : {summary.pending_total:.2f}")
    if summary.paid_total:
        click.echo(f"Paid                : {summary.paid_total:.2f}")
    if summary.cancelled_total:
        click.echo(f"Cancelled           : {summary.cancelled_total:.2f}")
    if summary.difference:
        click.echo(f"Difference          : {summary.difference:.2f}")
    click.echo(
        f"Installments        : {summary.installment_count} ({summary.manual_count} manual)"
    )
    if summary.first_due_date is not None:
        click.echo(f"First due date      : {summary.first_due_date.isoformat()}")
        click.echo(f"Last due date       : {summary.last_due_date.isoformat()}")
    if summary.overdue_count:
        click.echo(f"Overdue             : {summary.overdue_count}")
    click.echo("-" * 72)


def print_schedule(installments: Iterable[Installment]) -> None:
    """Print the installment table."""
    headers = ["#", "Due date", "Amount", "Origin", "Status"]
    click.echo("\t".join(headers))
    for inst in installments:
        row = [
            str(inst.sequence_number),
            inst.due_date.isoformat(),
            f"{inst.amount:.2f}",
            inst.origin.value,
            inst.payment_status.value,
        ]
        click.echo("\t".join(row))


def print_findings(findings: Sequence[Finding]) -> None:
    if not findings:
        click.echo("No findings.")
        return
    click.echo(f"Findings ({len(findings)})")
    for finding in findings:
        click.secho(f"  [{finding.code}] {finding.message}", fg="yellow")
