"""Conversion between engine objects and plain JSON/CSV data.

Amounts are written as strings ("33.34") so a schedule read back from JSON
reproduces its cents exactly; dates use ISO ``YYYY-MM-DD``.
"""

from __future__ import annotations

import csv
import json
from dataclasses import fields
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .data_models import (
    Finding,
    Installment,
    Origin,
    PaymentStatus,
    ScheduleParameters,
    ScheduleSummary,
)
from .utils import decimal_from_str, parse_date

CSV_HEADER = ["Number", "Due_Date", "Amount", "Origin", "Status"]


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    return value


def _required(data: Mapping[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError as exc:
        raise ValueError(f"Missing field: {key}") from exc


def installment_to_dict(inst: Installment) -> Dict[str, Any]:
    return {
        "sequence_number": inst.sequence_number,
        "due_date": inst.due_date.isoformat(),
        "amount": str(inst.amount),
        "origin": inst.origin.value,
        "payment_status": inst.payment_status.value,
    }


def installment_from_dict(data: Mapping[str, Any]) -> Installment:
    """Build an :class:`Installment`, raising ``ValueError`` on malformed input."""
    try:
        origin = Origin(data.get("origin", Origin.AUTO.value))
        status = PaymentStatus(data.get("payment_status", PaymentStatus.PENDING.value))
        sequence_number = int(_required(data, "sequence_number"))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid installment: {dict(data)}") from exc
    return Installment(
        sequence_number=sequence_number,
        due_date=parse_date(str(_required(data, "due_date"))),
        amount=decimal_from_str(str(_required(data, "amount"))),
        origin=origin,
        payment_status=status,
    )


def installments_from_list(items: Iterable[Mapping[str, Any]]) -> Tuple[Installment, ...]:
    return tuple(installment_from_dict(item) for item in items or ())


def parameters_to_dict(params: ScheduleParameters) -> Dict[str, Any]:
    return {
        "target_balance": str(params.target_balance),
        "first_due_date": params.first_due_date.isoformat(),
        "count": params.count,
        "periodicity": params.periodicity.value,
        "contract_start_date": params.contract_start_date.isoformat(),
    }


def parameters_from_dict(data: Mapping[str, Any]) -> ScheduleParameters:
    """Build :class:`ScheduleParameters` from a dict.

    ``target_balance`` may be replaced by ``contract_value`` plus an optional
    ``down_payment``.
    """
    first = data.get("first_due_date")
    start = data.get("contract_start_date")
    try:
        count = int(_required(data, "count"))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid installment count: {data.get('count')}") from exc
    schedule = {
        "first_due_date": parse_date(str(first)) if first else None,
        "count": count,
        "periodicity": data.get("periodicity", "monthly"),
        "contract_start_date": parse_date(str(start)) if start else None,
    }
    if "target_balance" in data:
        return ScheduleParameters(
            target_balance=decimal_from_str(str(data["target_balance"])), **schedule
        )
    down_payment = data.get("down_payment")
    return ScheduleParameters.from_contract(
        contract_value=decimal_from_str(str(_required(data, "contract_value"))),
        down_payment=decimal_from_str(str(down_payment)) if down_payment else None,
        **schedule,
    )


def finding_to_dict(finding: Finding) -> Dict[str, Any]:
    data = {"code": finding.code, "message": finding.message}
    for f in fields(finding):
        data[f.name] = _plain(getattr(finding, f.name))
    return data


def summary_to_dict(summary: ScheduleSummary) -> Dict[str, Any]:
    return {f.name: _plain(getattr(summary, f.name)) for f in fields(summary)}


def build_document(
    params: ScheduleParameters,
    installments: Sequence[Installment],
    findings: Sequence[Finding] = (),
    summary: Optional[ScheduleSummary] = None,
) -> Dict[str, Any]:
    """Return the JSON document shared by the CLI exports and the web API."""
    document: Dict[str, Any] = {
        "parameters": parameters_to_dict(params),
        "installments": [installment_to_dict(inst) for inst in installments],
        "findings": [finding_to_dict(f) for f in findings],
    }
    if summary is not None:
        document["summary"] = summary_to_dict(summary)
    return document


def export_to_json(path: Path, document: Dict[str, Any]) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)


def load_document(path: Path) -> Tuple[ScheduleParameters, Tuple[Installment, ...]]:
    """Read parameters and installments back from a JSON export."""
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{path} is not valid JSON: {exc}") from exc
    params = parameters_from_dict(_required(data, "parameters"))
    return params, installments_from_list(data.get("installments", []))


def export_to_csv(path: Path, installments: Sequence[Installment]) -> None:
    """Export the installment table to a CSV file."""
    rows: List[List[Any]] = [
        [
            inst.sequence_number,
            inst.due_date.isoformat(),
            str(inst.amount),
            inst.origin.value,
            inst.payment_status.value,
        ]
        for inst in installments
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        writer.writerows(rows)
