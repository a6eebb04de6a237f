# Overview: Flask API routes for customer operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import handle_service_errors, json_body
from ..services import customer_service


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@handle_service_errors("list customers")
def list_customers_route():
    customers = customer_service.list_customers(search=request.args.get("search"))
    return jsonify([c.to_dict() for c in customers])


@customers_bp.post("")
@handle_service_errors("create customer")
def create_customer_route():
    data = json_body()
    customer = customer_service.create_customer(
        name=data.get("name"),
        email=data.get("email"),
        phone=data.get("phone"),
        address=data.get("address"),
        status=data.get("status") or "Active",
    )
    return jsonify(customer.to_dict()), 201


@customers_bp.get("/<int:customer_id>")
@handle_service_errors("load customer")
def get_customer_route(customer_id: int):
    return jsonify(customer_service.get_customer(customer_id).to_dict())


@customers_bp.put("/<int:customer_id>")
@handle_service_errors("update customer")
def update_customer_route(customer_id: int):
    customer = customer_service.update_customer(customer_id, json_body())
    return jsonify(customer.to_dict())


@customers_bp.delete("/<int:customer_id>")
@handle_service_errors("delete customer")
def delete_customer_route(customer_id: int):
    customer_service.delete_customer(customer_id)
    return jsonify({"message": "Customer deleted successfully"})
