# Overview: Flask API routes for gate-out entries; parses input and returns JSON responses.

from flask import Blueprint, jsonify

from ..decorators import handle_service_errors, json_body
from ..services import gate_out_service


gate_out_bp = Blueprint("gate_out", __name__, url_prefix="/api/gate-out")


@gate_out_bp.get("")
@handle_service_errors("list gate-out entries")
def list_gate_out_route():
    return jsonify([r.to_dict() for r in gate_out_service.list_gate_out()])


@gate_out_bp.post("")
@handle_service_errors("create gate-out entry")
def create_gate_out_route():
    data = json_body()
    record = gate_out_service.create_gate_out(
        item_name=data.get("item_name"),
        units=data.get("units"),
        quantity=data.get("quantity"),
        sale_price=data.get("sale_price"),
        payment_status=data.get("payment_status"),
        source=data.get("source"),
        date=data.get("date"),
    )
    return jsonify(record.to_dict()), 201


@gate_out_bp.put("/<int:record_id>")
@handle_service_errors("update gate-out entry")
def update_gate_out_route(record_id: int):
    record = gate_out_service.update_gate_out(record_id, json_body())
    return jsonify(record.to_dict())


@gate_out_bp.delete("/<int:record_id>")
@handle_service_errors("delete gate-out entry")
def delete_gate_out_route(record_id: int):
    gate_out_service.delete_gate_out(record_id)
    return jsonify({"message": "Entry deleted successfully"})
