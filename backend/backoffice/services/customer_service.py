# Overview: Service-layer operations for customers; encapsulates business logic and database work.

from ..extensions import db
from ..models import Customer
from ..validation import (
    NotFoundError,
    ValidationError,
    is_valid_email,
    require_choice,
    require_text,
)


CUSTOMER_STATUSES = ("Active", "Inactive")

UPDATABLE_FIELDS = {"name", "email", "phone", "address", "status"}


def _clean_email(value) -> str:
    email = require_text(value, "email").lower()
    if not is_valid_email(email):
        raise ValidationError("Please provide a valid email", errors={"email": "invalid email"})
    return email


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def list_customers(*, search: str | None = None) -> list[Customer]:
    q = db.session.query(Customer)
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(Customer.name.ilike(like) | Customer.email.ilike(like) | Customer.phone.ilike(like))
    return q.order_by(Customer.created_at.desc(), Customer.id.desc()).all()


def create_customer(*, name, email, phone, address, status="Active") -> Customer:
    errors = {}
    for field, value in (("name", name), ("email", email), ("phone", phone), ("address", address)):
        if value is None or not str(value).strip():
            errors[field] = f"{field} is required"
    if errors:
        raise ValidationError("Missing required fields", errors=errors)

    customer = Customer(
        name=require_text(name, "name"),
        email=_clean_email(email),
        phone=require_text(phone, "phone"),
        address=require_text(address, "address"),
        status=require_choice(status or "Active", "status", CUSTOMER_STATUSES),
    )
    db.session.add(customer)
    db.session.commit()
    return customer


def update_customer(customer_id: int, patch: dict) -> Customer:
    customer = get_customer(customer_id)

    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Field not allowed: {sorted(unknown)[0]}")

    if "name" in patch:
        customer.name = require_text(patch["name"], "name")
    if "email" in patch:
        customer.email = _clean_email(patch["email"])
    if "phone" in patch:
        customer.phone = require_text(patch["phone"], "phone")
    if "address" in patch:
        customer.address = require_text(patch["address"], "address")
    if "status" in patch:
        customer.status = require_choice(patch["status"], "status", CUSTOMER_STATUSES)

    db.session.commit()
    return customer


def delete_customer(customer_id: int) -> None:
    """Hard delete. Invoices keep their customer_id and embedded snapshot."""
    customer = get_customer(customer_id)
    db.session.delete(customer)
    db.session.commit()
