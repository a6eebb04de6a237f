# Overview: Service-layer operations for gate-in invoices; encapsulates business logic and database work.

"""
Gate-In Service

Incoming raw-material invoices with line items and a payment sub-ledger.

INVARIANTS:
- total_amount == sum(quantity * unit_price) over items, computed at create time
- payment_status is re-derived after every payment append
- invoice_number comes from the "gate_in_invoice" counter, never from max()+1

update_gate_in() is a plain field merge: it does not recompute total_amount
or payment_status. Callers editing items must send consistent totals.
"""

from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import GateInItem, GateInPayment, GateInRecord, Vendor
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
from .sequence_service import GATE_IN_INVOICE, next_value
from backoffice.time_utils import utcnow


PAYMENT_STATUS_PAID = "Paid"
PAYMENT_STATUS_PARTIAL = "Partial"
PAYMENT_STATUS_PENDING = "Pending"
PAYMENT_STATUSES = (PAYMENT_STATUS_PAID, PAYMENT_STATUS_PARTIAL, PAYMENT_STATUS_PENDING)

PAYMENT_METHODS = ("Cash", "BankTransfer", "Cheque", "Other")

UPDATABLE_FIELDS = {"vendor_id", "items", "total_amount", "payment_status", "date"}


def derive_payment_status(total: Decimal, paid: Decimal) -> str:
    """Pending until something is paid; then Paid if paid >= total, else Partial."""
    if paid <= 0:
        return PAYMENT_STATUS_PENDING
    if paid >= total:
        return PAYMENT_STATUS_PAID
    return PAYMENT_STATUS_PARTIAL


def _build_items(items) -> list[GateInItem]:
    if not isinstance(items, list) or not items:
        raise ValidationError("items must be a non-empty array")

    built = []
    for idx, raw in enumerate(items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{idx}] must be an object")
        quantity = to_amount(raw.get("quantity"), f"items[{idx}].quantity", strict=True)
        unit_price = to_amount(raw.get("unit_price"), f"items[{idx}].unit_price", strict=True)
        if quantity <= 0:
            raise ValidationError(f"items[{idx}].quantity must be > 0")
        if unit_price <= 0:
            raise ValidationError(f"items[{idx}].unit_price must be > 0")
        built.append(GateInItem(
            name=require_text(raw.get("name"), f"items[{idx}].name"),
            units=require_text(raw.get("units"), f"items[{idx}].units"),
            quantity=quantity,
            unit_price=unit_price,
            total=quantity * unit_price,
        ))
    return built


def _resolve_vendor_id(value) -> int:
    vendor_id = to_int(value, "vendor_id")
    if not db.session.get(Vendor, vendor_id):
        raise NotFoundError("Vendor not found")
    return vendor_id


def _commit_numbered(record) -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning("Gate-in invoice number collision for %s", record.invoice_number)
        raise ConflictError("Invoice number already in use, please try again")


def get_gate_in(record_id: int) -> GateInRecord:
    record = db.session.get(GateInRecord, record_id)
    if not record:
        raise NotFoundError("Entry not found")
    return record


def list_gate_in(*, vendor_id: int | None = None) -> list[GateInRecord]:
    """Newest first."""
    q = db.session.query(GateInRecord)
    if vendor_id is not None:
        q = q.filter(GateInRecord.vendor_id == vendor_id)
    return q.order_by(GateInRecord.created_at.desc(), GateInRecord.id.desc()).all()


def create_gate_in(*, vendor_id, items, date=None) -> GateInRecord:
    """
    Record an incoming invoice.

    Raises:
        ValidationError: items missing or malformed
        NotFoundError: vendor_id does not resolve
        ConflictError: invoice number collided (caller should retry)
    """
    built = _build_items(items)
    vendor_id = _resolve_vendor_id(vendor_id)
    when = to_datetime(date, "date") if date not in (None, "") else utcnow()

    total = sum((item.total for item in built), Decimal("0"))

    record = GateInRecord(
        invoice_number=next_value(GATE_IN_INVOICE),
        vendor_id=vendor_id,
        total_amount=total,
        payment_status=derive_payment_status(total, Decimal("0")),
        date=when,
    )
    record.items = built

    db.session.add(record)
    _commit_numbered(record)
    return record


def update_gate_in(record_id: int, patch: dict) -> GateInRecord:
    """Direct field merge; total_amount and payment_status are taken as given."""
    record = get_gate_in(record_id)

    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Field not allowed: {sorted(unknown)[0]}")

    if "vendor_id" in patch:
        record.vendor_id = _resolve_vendor_id(patch["vendor_id"])
    if "items" in patch:
        record.items = _build_items(patch["items"])
    if "total_amount" in patch:
        total = to_amount(patch["total_amount"], "total_amount")
        if total < 0:
            raise ValidationError("total_amount must be >= 0")
        record.total_amount = total
    if "payment_status" in patch:
        record.payment_status = require_choice(patch["payment_status"], "payment_status", PAYMENT_STATUSES)
    if "date" in patch:
        record.date = to_datetime(patch["date"], "date")

    db.session.commit()
    return record


def add_payment(record_id: int, *, amount, method, date=None, reference=None) -> GateInRecord:
    """
    Append a payment and re-derive payment_status.

    Overpayment is accepted; the record simply reads as Paid.
    """
    value = to_amount(amount, "amount")
    if value <= 0:
        raise ValidationError("amount must be > 0")
    method = require_choice(method, "method", PAYMENT_METHODS)
    when = to_datetime(date, "date") if date not in (None, "") else utcnow()
    if reference is not None:
        reference = str(reference).strip() or None

    def _op() -> GateInRecord:
        record = lock_row(GateInRecord, record_id)
        if not record:
            raise NotFoundError("Entry not found")

        record.payments.append(GateInPayment(amount=value, method=method, date=when, reference=reference))
        record.payment_status = derive_payment_status(
            Decimal(record.total_amount), Decimal(record.amount_paid)
        )
        db.session.commit()
        return record

    return run_with_retry(_op, label=f"Gate-in payment on entry {record_id}")


def delete_gate_in(record_id: int) -> None:
    record = get_gate_in(record_id)
    db.session.delete(record)
    db.session.commit()
