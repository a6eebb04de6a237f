# Overview: Flask API routes for vendor operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import handle_service_errors, json_body
from ..services import vendor_service


vendors_bp = Blueprint("vendors", __name__, url_prefix="/api/vendors")


@vendors_bp.get("")
@handle_service_errors("list vendors")
def list_vendors_route():
    """
    Query parameters:
    - search: substring of name, email, phone or company
    - status: Active | Inactive
    """
    vendors = vendor_service.list_vendors(
        search=request.args.get("search"),
        status=request.args.get("status"),
    )
    return jsonify([v.to_dict() for v in vendors])


@vendors_bp.post("")
@handle_service_errors("create vendor")
def create_vendor_route():
    """
    Request body:
    {
        "name": "Acme Metals",        // required, >= 2 chars
        "email": "sales@acme.test",   // required, unique
        "phone": "03001234567",       // required, digits, >= 10, unique
        "address": "12 Mill Road",    // required, >= 5 chars
        "company": "Acme Ltd",        // optional
        "status": "Active"            // optional
    }
    """
    data = json_body()
    vendor = vendor_service.create_vendor(
        name=data.get("name"),
        email=data.get("email"),
        phone=data.get("phone"),
        address=data.get("address"),
        company=data.get("company"),
        status=data.get("status") or "Active",
    )
    return jsonify(vendor.to_dict()), 201


@vendors_bp.get("/<int:vendor_id>")
@handle_service_errors("load vendor")
def get_vendor_route(vendor_id: int):
    return jsonify(vendor_service.get_vendor(vendor_id).to_dict())


@vendors_bp.put("/<int:vendor_id>")
@handle_service_errors("update vendor")
def update_vendor_route(vendor_id: int):
    vendor = vendor_service.update_vendor(vendor_id, json_body())
    return jsonify(vendor.to_dict())


@vendors_bp.delete("/<int:vendor_id>")
@handle_service_errors("delete vendor")
def delete_vendor_route(vendor_id: int):
    vendor_service.delete_vendor(vendor_id)
    return jsonify({"message": "Vendor deleted successfully"})


@vendors_bp.get("/<int:vendor_id>/ledger")
@handle_service_errors("load vendor ledger")
def vendor_ledger_route(vendor_id: int):
    """Vendor, its gate-in records oldest first, and billed / paid / balance totals."""
    return jsonify(vendor_service.vendor_ledger(vendor_id))
