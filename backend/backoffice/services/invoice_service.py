# Overview: Service-layer operations for sales invoices; encapsulates business logic and database work.

"""
Invoice Service

Sales invoices with line items, a payment history, and derived financials.

INVARIANTS (re-established on every create / update / payment):
- subtotal == sum(quantity * price) over line items
- total == subtotal + tax - discount
- due == total - paid
- status == derive_invoice_status(due, due_date, now)

Status also drifts with the clock alone (an unpaid invoice passes its due
date). Reads report the derived status (Invoice.to_dict) and
refresh_invoice_statuses() writes drifted values back so filtering on the
persisted column stays accurate.

Customer fields are snapshotted into the invoice when it is created and
when its customer changes; later edits to the Customer never reach it.
"""

from __future__ import annotations

import math
from decimal import Decimal

from flask import current_app
from sqlalchemy import and_, or_, update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Customer, Invoice, InvoiceLineItem, InvoicePayment
from ..models.invoices import (
    INVOICE_STATUS_OVERDUE,
    INVOICE_STATUS_PAID,
    INVOICE_STATUS_PENDING,
    derive_invoice_status,
)
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    require_choice,
    require_text,
    to_amount,
    to_datetime,
    to_int,
)
from .concurrency import lock_row, run_with_retry
from .sequence_service import INVOICE, format_invoice_number, next_value
from backoffice.time_utils import utcnow


PAYMENT_METHODS = ("Cash", "CreditCard", "BankTransfer")

UPDATABLE_FIELDS = {
    "customer_id",
    "line_items",
    "payment_method",
    "date",
    "due_date",
    "tax",
    "discount",
    "paid",
    "notes",
}

ZERO = Decimal("0")


class InvoiceTotals:
    """Financial fields derived from line items and the adjustable amounts."""

    def __init__(self, *, subtotal: Decimal, tax: Decimal, discount: Decimal, paid: Decimal):
        self.subtotal = subtotal
        self.tax = tax
        self.discount = discount
        self.paid = paid
        self.total = subtotal + tax - discount
        self.due = self.total - paid

    def apply(self, invoice: Invoice, *, now=None) -> None:
        invoice.subtotal = self.subtotal
        invoice.tax = self.tax
        invoice.discount = self.discount
        invoice.paid = self.paid
        invoice.total = self.total
        invoice.due = self.due
        invoice.status = derive_invoice_status(self.due, invoice.due_date, now or utcnow())


def _non_negative(value, field: str) -> Decimal:
    if value is None:
        return ZERO
    amount = to_amount(value, field)
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0")
    return amount


def _build_line_items(line_items) -> list[InvoiceLineItem]:
    if not isinstance(line_items, list) or not line_items:
        raise ValidationError("At least one line item is required")

    built = []
    for idx, raw in enumerate(line_items):
        if not isinstance(raw, dict):
            raise ValidationError(f"line_items[{idx}] must be an object")
        quantity = to_int(raw.get("quantity"), f"line_items[{idx}].quantity")
        if quantity < 1:
            raise ValidationError(f"line_items[{idx}].quantity must be >= 1")
        built.append(InvoiceLineItem(
            name=require_text(raw.get("name"), f"line_items[{idx}].name"),
            quantity=quantity,
            price=_non_negative(raw.get("price"), f"line_items[{idx}].price"),
        ))
    return built


def _subtotal(line_items) -> Decimal:
    return sum((Decimal(line.quantity) * Decimal(line.price) for line in line_items), ZERO)


def _resolve_customer(customer_id) -> Customer:
    if customer_id in (None, ""):
        raise ValidationError("customer_id is required")
    customer = db.session.get(Customer, to_int(customer_id, "customer_id"))
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def _snapshot_customer(invoice: Invoice, customer: Customer) -> None:
    snapshot = customer.snapshot()
    invoice.customer_id = snapshot["id"]
    for field in ("name", "email", "phone", "address"):
        setattr(invoice, f"customer_{field}", snapshot[field])


def _check_totals(totals: InvoiceTotals) -> None:
    if totals.total < 0:
        raise ValidationError("Discount cannot exceed subtotal plus tax")
    if totals.paid > totals.total:
        raise ValidationError("Paid amount cannot exceed total amount")


def get_invoice(invoice_id: int) -> Invoice:
    invoice = db.session.get(Invoice, invoice_id)
    if not invoice:
        raise NotFoundError("Invoice not found")
    return invoice


def create_invoice(
    *,
    customer_id,
    line_items,
    payment_method,
    date=None,
    due_date=None,
    tax=None,
    discount=None,
    paid=None,
    notes=None,
) -> Invoice:
    """
    Create an invoice.

    due_date defaults to the invoice date.

    Raises:
        ValidationError: malformed input, or paid > total
        NotFoundError: customer_id does not resolve
        ConflictError: invoice number collided (caller should retry)
    """
    built = _build_line_items(line_items)
    payment_method = require_choice(payment_method, "payment_method", PAYMENT_METHODS)
    when = to_datetime(date, "date") if date not in (None, "") else utcnow()
    due_when = to_datetime(due_date, "due_date") if due_date not in (None, "") else when

    totals = InvoiceTotals(
        subtotal=_subtotal(built),
        tax=_non_negative(tax, "tax"),
        discount=_non_negative(discount, "discount"),
        paid=_non_negative(paid, "paid"),
    )
    _check_totals(totals)

    customer = _resolve_customer(customer_id)

    invoice = Invoice(
        date=when,
        due_date=due_when,
        payment_method=payment_method,
        notes=(str(notes).strip() or None) if notes is not None else None,
    )
    _snapshot_customer(invoice, customer)
    invoice.line_items = built
    totals.apply(invoice)
    invoice.invoice_number = format_invoice_number(next_value(INVOICE))

    db.session.add(invoice)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning("Invoice number collision for %s", invoice.invoice_number)
        raise ConflictError("Invoice number already in use, please try again")
    return invoice


def update_invoice(invoice_id: int, patch: dict) -> Invoice:
    """
    Merge fields and recompute every derived amount and the status.

    A changed customer_id is re-resolved and re-snapshotted.
    """
    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Field not allowed: {sorted(unknown)[0]}")

    invoice = get_invoice(invoice_id)

    if "customer_id" in patch and patch["customer_id"] not in (None, ""):
        new_customer_id = to_int(patch["customer_id"], "customer_id")
        if new_customer_id != invoice.customer_id:
            _snapshot_customer(invoice, _resolve_customer(new_customer_id))

    if "line_items" in patch:
        invoice.line_items = _build_line_items(patch["line_items"])
    if "payment_method" in patch:
        invoice.payment_method = require_choice(patch["payment_method"], "payment_method", PAYMENT_METHODS)
    if "date" in patch:
        invoice.date = to_datetime(patch["date"], "date")
    if "due_date" in patch:
        invoice.due_date = to_datetime(patch["due_date"], "due_date")
    if "notes" in patch:
        notes = patch["notes"]
        invoice.notes = (str(notes).strip() or None) if notes is not None else None

    totals = InvoiceTotals(
        subtotal=_subtotal(invoice.line_items),
        tax=_non_negative(patch["tax"], "tax") if "tax" in patch else Decimal(invoice.tax),
        discount=_non_negative(patch["discount"], "discount") if "discount" in patch else Decimal(invoice.discount),
        paid=_non_negative(patch["paid"], "paid") if "paid" in patch else Decimal(invoice.paid),
    )
    _check_totals(totals)
    totals.apply(invoice)

    db.session.commit()
    return invoice


def add_payment(invoice_id: int, *, amount, method=None) -> Invoice:
    """
    Record a payment of 0 < amount <= due.

    method defaults to the invoice's payment method.
    """
    value = to_amount(amount, "amount")
    if value <= 0:
        raise ValidationError("Payment amount must be positive")
    if method not in (None, ""):
        method = require_choice(method, "method", PAYMENT_METHODS)

    def _op() -> Invoice:
        invoice = lock_row(Invoice, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")
        if value > Decimal(invoice.due):
            raise ValidationError("Payment amount exceeds due amount")

        now = utcnow()
        invoice.payment_history.append(InvoicePayment(
            amount=value,
            date=now,
            method=method or invoice.payment_method,
        ))
        InvoiceTotals(
            subtotal=Decimal(invoice.subtotal),
            tax=Decimal(invoice.tax),
            discount=Decimal(invoice.discount),
            paid=Decimal(invoice.paid) + value,
        ).apply(invoice, now=now)
        db.session.commit()
        return invoice

    return run_with_retry(_op, label=f"Payment on invoice {invoice_id}")


def delete_invoice(invoice_id: int) -> None:
    invoice = get_invoice(invoice_id)
    db.session.delete(invoice)
    db.session.commit()


def refresh_invoice_statuses(*, now=None) -> int:
    """
    Persist statuses that drifted since the last write.

    Returns the number of invoices whose status changed.
    """
    now = now or utcnow()
    rules = (
        (INVOICE_STATUS_PAID, Invoice.due <= 0),
        (INVOICE_STATUS_OVERDUE, and_(Invoice.due > 0, Invoice.due_date < now)),
        (INVOICE_STATUS_PENDING, and_(Invoice.due > 0, Invoice.due_date >= now)),
    )

    changed = 0
    for status, condition in rules:
        stmt = (
            update(Invoice)
            .where(condition, Invoice.status != status)
            .values(status=status, version_id=Invoice.version_id + 1)
            .execution_options(synchronize_session=False)
        )
        changed += db.session.execute(stmt).rowcount or 0

    db.session.commit()
    if changed:
        current_app.logger.info("Refreshed status of %s invoice(s)", changed)
    return changed


def list_invoices(*, page: int = 1, limit: int = 10, search: str | None = None) -> dict:
    """
    Paginated listing, newest invoice date first.

    search matches invoice_number or the snapshotted customer name.
    """
    refresh_invoice_statuses()

    page = max(page, 1)
    limit = max(1, min(limit, current_app.config["MAX_PAGE_SIZE"]))

    q = db.session.query(Invoice)
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(or_(Invoice.invoice_number.ilike(like), Invoice.customer_name.ilike(like)))

    count = q.count()
    invoices = (
        q.order_by(Invoice.date.desc(), Invoice.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
        .all()
    )

    return {
        "invoices": invoices,
        "total_pages": math.ceil(count / limit),
        "current_page": page,
    }


def list_by_customer(customer_id: int) -> list[Invoice]:
    return (
        db.session.query(Invoice)
        .filter(Invoice.customer_id == customer_id)
        .order_by(Invoice.date.desc(), Invoice.id.desc())
        .all()
    )
