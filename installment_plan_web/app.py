"""JSON API over the schedule editor.

The contract-management service posts the schedule parameters and the current
pending installments with every request and receives the proposed next
schedule, its findings and its totals. Nothing is stored between requests;
persisting an accepted schedule is the caller's job.
"""

import logging
import os
from typing import Any, Dict, Tuple

from flask import Flask, jsonify, request

from installment_plan.config import load_settings
from installment_plan.data_models import EditResult, Installment
from installment_plan.editor import ScheduleEditor
from installment_plan.serialization import (
    build_document,
    finding_to_dict,
    installments_from_list,
    parameters_from_dict,
    summary_to_dict,
)
from installment_plan.utils import decimal_from_str, parse_date

logger = logging.getLogger(__name__)

app = Flask(__name__)


def _read_request() -> Tuple[ScheduleEditor, Tuple[Installment, ...], Dict[str, Any]]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    if "parameters" not in body:
        raise ValueError("Missing field: parameters")
    params = parameters_from_dict(body["parameters"])
    installments = installments_from_list(body.get("installments", []))
    return ScheduleEditor(params, load_settings()), installments, body


def _respond(editor: ScheduleEditor, result: EditResult):
    summary = editor.summarize(result.installments)
    return jsonify(build_document(editor.params, result.installments, result.findings, summary))


def _field(body: Dict[str, Any], name: str) -> Any:
    if body.get(name) in (None, ""):
        raise ValueError(f"Missing field: {name}")
    return body[name]


@app.errorhandler(ValueError)
def handle_bad_input(exc: ValueError):
    logger.info("Rejected request to %s: %s", request.path, exc)
    return jsonify({"error": str(exc)}), 400


@app.post("/api/schedule/regenerate")
def regenerate():
    editor, installments, _ = _read_request()
    return _respond(editor, editor.regenerate(installments))


@app.post("/api/schedule/redistribute")
def redistribute():
    editor, installments, _ = _read_request()
    return _respond(editor, editor.redistribute(installments))


@app.post("/api/schedule/validate")
def validate():
    editor, installments, _ = _read_request()
    return jsonify({"findings": [finding_to_dict(f) for f in editor.validate(installments)]})


@app.post("/api/schedule/summary")
def summary():
    editor, installments, body = _read_request()
    today = parse_date(str(body["today"])) if body.get("today") else None
    return jsonify(summary_to_dict(editor.summarize(installments, today)))


@app.post("/api/schedule/installments")
def add_installment():
    editor, installments, body = _read_request()
    due_date = parse_date(str(body["due_date"])) if body.get("due_date") else None
    amount = decimal_from_str(str(body.get("amount") or "0"))
    return _respond(editor, editor.add_installment(installments, due_date, amount))


@app.post("/api/schedule/installments/<int:sequence_number>/remove")
def remove_installment(sequence_number: int):
    editor, installments, _ = _read_request()
    return _respond(editor, editor.remove_installment(installments, sequence_number))


@app.post("/api/schedule/installments/<int:sequence_number>/date")
def set_manual_date(sequence_number: int):
    editor, installments, body = _read_request()
    new_date = parse_date(str(_field(body, "due_date")))
    return _respond(editor, editor.set_manual_date(installments, sequence_number, new_date))


@app.post("/api/schedule/installments/<int:sequence_number>/amount")
def set_manual_amount(sequence_number: int):
    editor, installments, body = _read_request()
    new_amount = decimal_from_str(str(_field(body, "amount")))
    return _respond(editor, editor.set_manual_amount(installments, sequence_number, new_amount))


@app.post("/api/schedule/installments/<int:sequence_number>/pin")
def pin(sequence_number: int):
    editor, installments, _ = _read_request()
    return _respond(editor, editor.pin(installments, sequence_number))


@app.post("/api/schedule/installments/<int:sequence_number>/unpin")
def unpin(sequence_number: int):
    editor, installments, _ = _read_request()
    return _respond(editor, editor.unpin(installments, sequence_number))


if __name__ == "__main__":
    print("Starting installment schedule API...")
    app.run(debug=os.environ.get("FLASK_DEBUG") == "1")
