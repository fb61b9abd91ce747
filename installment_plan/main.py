"""Command-line interface for the installment engine.

This module uses the ``click`` library to implement a multi-command interface.
Users can generate a schedule from contract figures, pin individual
installments, check a saved schedule for problems, and redistribute or
regenerate it. Results can be printed to the terminal or exported to JSON/CSV
files; JSON exports can be fed back into the other commands.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple

import click

from .config import load_settings
from .data_models import EditResult, Installment, Origin, Periodicity, ScheduleParameters
from .editor import ScheduleEditor
from .formatter import print_findings, print_schedule, print_summary
from .serialization import build_document, export_to_csv, export_to_json, load_document
from .utils import parse_amount, parse_date, to_money

logger = logging.getLogger("installment_plan")

PERIODICITY_CHOICES = [p.value for p in Periodicity]


def _parse_date_option(value: Optional[str], name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint=name)


def _parse_amount_option(value: str, name: str):
    try:
        return to_money(parse_amount(value))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint=name)


def parse_manual_strings(values: Tuple[str, ...]) -> List[Installment]:
    """Parse ``SEQ:YYYY-MM-DD:AMOUNT`` pins into manual installments."""
    pins: List[Installment] = []
    for item in values:
        parts = item.split(":")
        if len(parts) != 3:
            raise click.BadParameter(
                f"Manual installment must be in SEQ:YYYY-MM-DD:AMOUNT format; got {item}",
                param_hint="--manual",
            )
        seq_str, date_str, amount_str = parts
        try:
            sequence_number = int(seq_str)
        except ValueError:
            raise click.BadParameter(f"Invalid installment number: {seq_str}", param_hint="--manual")
        if sequence_number < 1:
            raise click.BadParameter(
                f"Installment numbers start at 1; got {sequence_number}", param_hint="--manual"
            )
        pins.append(
            Installment(
                sequence_number=sequence_number,
                due_date=_parse_date_option(date_str, "--manual"),
                amount=_parse_amount_option(amount_str, "--manual"),
                origin=Origin.MANUAL,
            )
        )
    return pins


def build_parameters_from_options(
    balance: Optional[str],
    total: Optional[str],
    down_payment: Optional[str],
    first_date: str,
    count: int,
    periodicity: str,
    start_date: Optional[str],
) -> ScheduleParameters:
    if balance is None and total is None:
        raise click.UsageError("Provide either --balance or --total")
    if balance is not None and total is not None:
        raise click.UsageError("--balance and --total are mutually exclusive")
    first_due_date = _parse_date_option(first_date, "--first-date")
    contract_start_date = _parse_date_option(start_date, "--start-date")
    try:
        if balance is not None:
            return ScheduleParameters(
                target_balance=_parse_amount_option(balance, "--balance"),
                first_due_date=first_due_date,
                count=count,
                periodicity=periodicity,
                contract_start_date=contract_start_date,
            )
        return ScheduleParameters.from_contract(
            contract_value=_parse_amount_option(total, "--total"),
            down_payment=_parse_amount_option(down_payment, "--down-payment") if down_payment else None,
            first_due_date=first_due_date,
            count=count,
            periodicity=periodicity,
            contract_start_date=contract_start_date,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def _load(path: str) -> Tuple[ScheduleParameters, Tuple[Installment, ...]]:
    try:
        params, installments = load_document(Path(path))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--input")
    logger.info("Loaded %d installment(s) from %s", len(installments), path)
    return params, installments


def emit_result(
    editor: ScheduleEditor, result: EditResult, output: Optional[str], today: Optional[date] = None
) -> None:
    """Print the result or export it to ``output`` (.json or .csv)."""
    summary = editor.summarize(result.installments, today)
    if output:
        path = Path(output)
        suffix = path.suffix.lower()
        if suffix == ".json":
            export_to_json(
                path, build_document(editor.params, result.installments, result.findings, summary)
            )
        elif suffix == ".csv":
            export_to_csv(path, result.installments)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="--output")
        click.echo(f"Schedule exported to {path}")
        if result.findings:
            print_findings(result.findings)
        return
    print_summary(summary)
    print_schedule(result.installments)
    print_findings(result.findings)


@click.group()
def cli() -> None:
    """Generate and reconcile contract installment schedules."""
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@cli.command()
@click.option("--balance", "-b", "balance", help="Balance to split (contract value minus down payment)")
@click.option("--total", "total", help="Contract value; combined with --down-payment")
@click.option("--down-payment", "-d", "down_payment", help="Down payment subtracted from --total")
@click.option("--first-date", "-f", "first_date", required=True, help="Due date of installment #1 (YYYY-MM-DD)")
@click.option("--count", "-n", "count", required=True, type=int, help="Number of installments")
@click.option("--periodicity", "-p", type=click.Choice(PERIODICITY_CHOICES), default="monthly", help="Spacing between installments")
@click.option("--start-date", "-s", "start_date", help="Contract start date (YYYY-MM-DD); defaults to the first date")
@click.option("--manual", "manual", multiple=True, help="Pinned installment in SEQ:YYYY-MM-DD:AMOUNT format")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    balance: Optional[str],
    total: Optional[str],
    down_payment: Optional[str],
    first_date: str,
    count: int,
    periodicity: str,
    start_date: Optional[str],
    manual: Tuple[str, ...],
    output: Optional[str],
) -> None:
    """Generate a schedule, keeping any pinned installments."""
    params = build_parameters_from_options(
        balance, total, down_payment, first_date, count, periodicity, start_date
    )
    pins = parse_manual_strings(manual)
    editor = ScheduleEditor(params)
    result = editor.regenerate(pins)
    emit_result(editor, result, output)


@cli.command()
@click.option("--input", "-i", "input_path", required=True, type=click.Path(exists=True, dir_okay=False), help="JSON schedule exported by this tool")
def check(input_path: str) -> None:
    """Report problems in a saved schedule. Exits with status 1 if any are found."""
    params, installments = _load(input_path)
    editor = ScheduleEditor(params)
    findings = editor.validate(installments)
    print_findings(findings)
    if findings:
        raise SystemExit(1)


@cli.command()
@click.option("--input", "-i", "input_path", required=True, type=click.Path(exists=True, dir_okay=False), help="JSON schedule exported by this tool")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def redistribute(input_path: str, output: Optional[str]) -> None:
    """Spread the balance left by manual installments over the automatic ones."""
    params, installments = _load(input_path)
    editor = ScheduleEditor(params)
    emit_result(editor, editor.redistribute(installments), output)


@cli.command()
@click.option("--input", "-i", "input_path", required=True, type=click.Path(exists=True, dir_okay=False), help="JSON schedule exported by this tool")
@click.option("--count", "-n", "count", type=int, help="New number of installments")
@click.option("--periodicity", "-p", type=click.Choice(PERIODICITY_CHOICES), help="New spacing between installments")
@click.option("--first-date", "-f", "first_date", help="New due date of installment #1 (YYYY-MM-DD)")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def regenerate(
    input_path: str,
    count: Optional[int],
    periodicity: Optional[str],
    first_date: Optional[str],
    output: Optional[str],
) -> None:
    """Regenerate a saved schedule, keeping manual, paid and cancelled installments."""
    params, installments = _load(input_path)
    try:
        params = ScheduleParameters(
            target_balance=params.target_balance,
            first_due_date=_parse_date_option(first_date, "--first-date") or params.first_due_date,
            count=params.count if count is None else count,
            periodicity=periodicity or params.periodicity,
            contract_start_date=params.contract_start_date,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    editor = ScheduleEditor(params)
    emit_result(editor, editor.regenerate(installments), output)


if __name__ == "__main__":
    cli()
