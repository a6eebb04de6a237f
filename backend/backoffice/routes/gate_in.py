# Overview: Flask API routes for gate-in invoices; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import handle_service_errors, json_body
from ..services import gate_in_service


gate_in_bp = Blueprint("gate_in", __name__, url_prefix="/api/gate-in")


@gate_in_bp.get("")
@handle_service_errors("list gate-in entries")
def list_gate_in_route():
    """Newest first. Optional `vendor_id` filter."""
    vendor_id = request.args.get("vendor_id", type=int)
    records = gate_in_service.list_gate_in(vendor_id=vendor_id)
    return jsonify([r.to_dict() for r in records])


@gate_in_bp.post("")
@handle_service_errors("create gate-in entry")
def create_gate_in_route():
    """
    Request body:
    {
        "vendor_id": 1,
        "items": [{"name": "Steel", "units": "kg", "quantity": 10, "unit_price": 20}],
        "date": "2024-03-05T10:00:00Z"   // optional
    }
    """
    data = json_body()
    record = gate_in_service.create_gate_in(
        vendor_id=data.get("vendor_id"),
        items=data.get("items"),
        date=data.get("date"),
    )
    return jsonify(record.to_dict()), 201


@gate_in_bp.get("/<int:record_id>")
@handle_service_errors("load gate-in entry")
def get_gate_in_route(record_id: int):
    return jsonify(gate_in_service.get_gate_in(record_id).to_dict())


@gate_in_bp.put("/<int:record_id>")
@handle_service_errors("update gate-in entry")
def update_gate_in_route(record_id: int):
    record = gate_in_service.update_gate_in(record_id, json_body())
    return jsonify(record.to_dict())


@gate_in_bp.delete("/<int:record_id>")
@handle_service_errors("delete gate-in entry")
def delete_gate_in_route(record_id: int):
    gate_in_service.delete_gate_in(record_id)
    return jsonify({"message": "Entry deleted successfully"})


@gate_in_bp.post("/<int:record_id>/payments")
@handle_service_errors("add gate-in payment")
def add_gate_in_payment_route(record_id: int):
    """
    Request body:
    {"amount": 50, "method": "Cash", "date": "...", "reference": "..."}
    """
    data = json_body()
    record = gate_in_service.add_payment(
        record_id,
        amount=data.get("amount"),
        method=data.get("method"),
        date=data.get("date"),
        reference=data.get("reference"),
    )
    return jsonify(record.to_dict())
