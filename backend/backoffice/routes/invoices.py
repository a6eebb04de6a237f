# Overview: Flask API routes for sales invoices; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..decorators import handle_service_errors, json_body
from ..services import invoice_service


invoices_bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")


@invoices_bp.get("")
@handle_service_errors("list invoices")
def list_invoices_route():
    """
    Query parameters:
    - page: 1-based page (default 1)
    - limit: page size (default DEFAULT_PAGE_SIZE, clamped to MAX_PAGE_SIZE)
    - search: substring of invoice number or customer name

    Returns:
        {invoices: Invoice[], total_pages: int, current_page: int}
    """
    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", current_app.config["DEFAULT_PAGE_SIZE"], type=int)

    result = invoice_service.list_invoices(
        page=page,
        limit=limit,
        search=request.args.get("search"),
    )
    return jsonify({
        "invoices": [inv.to_dict() for inv in result["invoices"]],
        "total_pages": result["total_pages"],
        "current_page": result["current_page"],
    })


@invoices_bp.post("")
@handle_service_errors("create invoice")
def create_invoice_route():
    """
    Request body:
    {
        "customer_id": 1,
        "line_items": [{"name": "Widget", "quantity": 2, "price": 50}],
        "payment_method": "Cash",      // Cash | CreditCard | BankTransfer
        "date": "...", "due_date": "...",
        "tax": 10, "discount": 5, "paid": 50,
        "notes": "..."
    }
    """
    data = json_body()
    invoice = invoice_service.create_invoice(
        customer_id=data.get("customer_id"),
        line_items=data.get("line_items"),
        payment_method=data.get("payment_method"),
        date=data.get("date"),
        due_date=data.get("due_date"),
        tax=data.get("tax"),
        discount=data.get("discount"),
        paid=data.get("paid"),
        notes=data.get("notes"),
    )
    return jsonify(invoice.to_dict()), 201


@invoices_bp.get("/customer/<int:customer_id>")
@handle_service_errors("list customer invoices")
def list_customer_invoices_route(customer_id: int):
    invoices = invoice_service.list_by_customer(customer_id)
    return jsonify([inv.to_dict() for inv in invoices])


@invoices_bp.get("/<int:invoice_id>")
@handle_service_errors("load invoice")
def get_invoice_route(invoice_id: int):
    return jsonify(invoice_service.get_invoice(invoice_id).to_dict())


@invoices_bp.put("/<int:invoice_id>")
@handle_service_errors("update invoice")
def update_invoice_route(invoice_id: int):
    invoice = invoice_service.update_invoice(invoice_id, json_body())
    return jsonify(invoice.to_dict())


@invoices_bp.delete("/<int:invoice_id>")
@handle_service_errors("delete invoice")
def delete_invoice_route(invoice_id: int):
    invoice_service.delete_invoice(invoice_id)
    return jsonify({"message": "Invoice removed"})


@invoices_bp.post("/<int:invoice_id>/payments")
@handle_service_errors("add invoice payment")
def add_invoice_payment_route(invoice_id: int):
    """Request body: {"amount": 25, "method": "Cash"}   // method optional"""
    data = json_body()
    invoice = invoice_service.add_payment(
        invoice_id,
        amount=data.get("amount"),
        method=data.get("method"),
    )
    return jsonify(invoice.to_dict())
