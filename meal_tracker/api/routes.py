"""
HTTP API

JSON endpoints over the orchestrator flows. Validation problems are 400
with the specific message; storage and export failures are logged and
reported with a generic message and 500.
"""

from typing import Optional

from flask import Blueprint, current_app, jsonify, make_response, request

from meal_tracker.export import ExportError
from meal_tracker.logs import get_logger
from meal_tracker.models.expense import ExpenseInput, HolidayInput, ReceiptUpload
from meal_tracker.orchestrator import AppComponents
from meal_tracker.services.storage import NotFoundError, StorageError
from meal_tracker.validation import ValidationFailedError


logger = get_logger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _components() -> AppComponents:
    return current_app.extensions["meal_tracker"]


def _receipt_from_request() -> Optional[ReceiptUpload]:
    upload = request.files.get("receipt")
    if upload is None or not upload.filename:
        return None
    return ReceiptUpload(
        filename=upload.filename,
        content=upload.read(),
        content_type=upload.mimetype,
    )


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------

@api_bp.route("/expenses", methods=["GET"])
def list_expenses():
    try:
        expenses = _components().expense_flow.list_expenses()
    except StorageError:
        logger.exception("expenses_read_failed")
        return jsonify({"error": "Failed to read expenses"}), 500
    return jsonify({"expenses": [e.to_document() for e in expenses]})


@api_bp.route("/expenses", methods=["POST"])
def create_expense():
    form = ExpenseInput(
        date=request.form.get("date", ""),
        day=request.form.get("day", ""),
        amount=request.form.get("amount", ""),
        place=request.form.get("place", ""),
    )

    try:
        expense = _components().expense_flow.add_expense(form, _receipt_from_request())
    except ValidationFailedError as e:
        return jsonify({"error": str(e)}), 400
    except (StorageError, OSError):
        logger.exception("expense_create_failed")
        return jsonify({"error": "Failed to add expense"}), 500

    return jsonify({"success": True, "expense": expense.to_document()})


@api_bp.route("/expenses/<expense_id>", methods=["DELETE"])
def delete_expense(expense_id):
    try:
        _components().expense_flow.delete_expense(expense_id)
    except NotFoundError:
        return jsonify({"error": "Expense not found"}), 404
    except StorageError:
        logger.exception("expense_delete_failed", expense_id=expense_id)
        return jsonify({"error": "Failed to delete expense"}), 500
    return jsonify({"success": True})


@api_bp.route("/summary", methods=["GET"])
def expense_summary():
    try:
        summary = _components().expense_flow.summarize()
    except StorageError:
        logger.exception("summary_failed")
        return jsonify({"error": "Failed to read expenses"}), 500
    return jsonify(summary.to_document())


# ---------------------------------------------------------------------------
# Holidays
# ---------------------------------------------------------------------------

@api_bp.route("/holidays", methods=["GET"])
def list_holidays():
    try:
        holidays = _components().holiday_flow.list_holidays()
    except StorageError:
        logger.exception("holidays_read_failed")
        return jsonify({"error": "Failed to read holidays"}), 500
    return jsonify({"holidays": [h.to_document() for h in holidays]})


@api_bp.route("/holidays", methods=["POST"])
def create_holiday():
    if request.is_json:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid request: expected a JSON object"}), 400
    else:
        data = request.form

    form = HolidayInput(
        date=str(data.get("date") or ""),
        name=str(data.get("name") or ""),
    )

    try:
        holiday = _components().holiday_flow.add_holiday(form)
    except ValidationFailedError as e:
        return jsonify({"error": str(e)}), 400
    except StorageError:
        logger.exception("holiday_create_failed")
        return jsonify({"error": "Failed to add holiday"}), 500

    return jsonify({"success": True, "holiday": holiday.to_document()})


@api_bp.route("/holidays/<holiday_id>", methods=["DELETE"])
def delete_holiday(holiday_id):
    try:
        _components().holiday_flow.delete_holiday(holiday_id)
    except NotFoundError:
        return jsonify({"error": "Holiday not found"}), 404
    except StorageError:
        logger.exception("holiday_delete_failed", holiday_id=holiday_id)
        return jsonify({"error": "Failed to delete holiday"}), 500
    return jsonify({"success": True})


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

@api_bp.route("/export", methods=["GET"])
def export_archive():
    try:
        filename, archive = _components().export_flow.export_archive()
    except (StorageError, ExportError):
        logger.exception("export_request_failed")
        return jsonify({"error": "Failed to export"}), 500

    response = make_response(archive)
    response.headers["Content-Type"] = "application/zip"
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    return response
