# Overview: Flask API routes for the expense roll-up; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import handle_service_errors, json_body
from ..services import expense_service


expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.get("/monthly")
@handle_service_errors("list monthly expenses")
def list_monthly_route():
    """Optional `date_range=YYYY-MM-DD,YYYY-MM-DD` (inclusive, matched by month)."""
    buckets = expense_service.list_monthly(date_range=request.args.get("date_range"))
    return jsonify({"results": len(buckets), "expenses": [b.to_dict() for b in buckets]})


@expenses_bp.get("/yearly")
@handle_service_errors("list yearly expenses")
def list_yearly_route():
    """Flattened month entries for `year` (default: current year)."""
    entries = expense_service.list_yearly(year=request.args.get("year"))
    return jsonify({"results": len(entries), "expenses": entries})


@expenses_bp.post("/transfer-daily")
@handle_service_errors("transfer daily expenses")
def transfer_daily_route():
    """
    Request body:
    {
        "date": "2024-03-05",
        "entries": [{"amount": 100, "date": "2024-03-05"}]
    }
    """
    data = json_body()
    result = expense_service.transfer_daily_to_monthly(
        date=data.get("date"),
        entries=data.get("entries"),
    )
    return jsonify(result)


@expenses_bp.post("/transfer-monthly")
@handle_service_errors("transfer monthly expenses")
def transfer_monthly_route():
    """Body may name {"year": 2024, "month": 3}; empty body rolls up last month."""
    data = json_body()
    result = expense_service.transfer_monthly_to_yearly(data.get("year"), data.get("month"))
    return jsonify(result)


@expenses_bp.post("/manual-transfer")
@handle_service_errors("run manual expense transfer")
def manual_transfer_route():
    """Roll last calendar month into its yearly bucket."""
    return jsonify(expense_service.transfer_monthly_to_yearly())


@expenses_bp.get("/analytics")
@handle_service_errors("load expense analytics")
def analytics_route():
    return jsonify(expense_service.get_expense_analytics())
