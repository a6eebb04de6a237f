# Overview: Service-layer operations for gate-out entries; encapsulates business logic and database work.

"""
Gate-Out Service

Outgoing goods, one implicit line per entry (quantity * sale_price).
There is no payment sub-ledger: payment_status is whatever the caller says.
invoice numbers come from the "gate_out_invoice" counter, starting at 1.
"""

from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import GateOutRecord
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    require_choice,
    require_text,
    to_amount,
    to_datetime,
)
from .sequence_service import GATE_OUT_INVOICE, next_value
from backoffice.time_utils import utcnow


PAYMENT_STATUSES = ("Paid", "Overdue", "Pending")

UPDATABLE_FIELDS = {"item_name", "units", "quantity", "sale_price", "payment_status", "date", "source"}


def _positive(value, field):
    amount = to_amount(value, field, strict=True)
    if amount <= 0:
        raise ValidationError(f"{field} must be > 0")
    return amount


def get_gate_out(record_id: int) -> GateOutRecord:
    record = db.session.get(GateOutRecord, record_id)
    if not record:
        raise NotFoundError("Entry not found")
    return record


def list_gate_out() -> list[GateOutRecord]:
    return (
        db.session.query(GateOutRecord)
        .order_by(GateOutRecord.created_at.desc(), GateOutRecord.id.desc())
        .all()
    )


def create_gate_out(
    *,
    item_name,
    units,
    quantity,
    sale_price,
    payment_status,
    source,
    date=None,
) -> GateOutRecord:
    quantity = _positive(quantity, "quantity")
    sale_price = _positive(sale_price, "sale_price")

    record = GateOutRecord(
        item_name=require_text(item_name, "item_name"),
        units=require_text(units, "units"),
        quantity=quantity,
        sale_price=sale_price,
        total=quantity * sale_price,
        payment_status=require_choice(payment_status, "payment_status", PAYMENT_STATUSES),
        source=require_text(source, "source"),
        date=to_datetime(date, "date") if date not in (None, "") else utcnow(),
    )
    record.invoice = next_value(GATE_OUT_INVOICE)

    db.session.add(record)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning("Gate-out invoice number collision for %s", record.invoice)
        raise ConflictError("Invoice number already in use, please try again")
    return record


def update_gate_out(record_id: int, patch: dict) -> GateOutRecord:
    """Field merge. total follows quantity and sale_price since it is the entry's only line."""
    record = get_gate_out(record_id)

    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Field not allowed: {sorted(unknown)[0]}")

    if "item_name" in patch:
        record.item_name = require_text(patch["item_name"], "item_name")
    if "units" in patch:
        record.units = require_text(patch["units"], "units")
    if "quantity" in patch:
        record.quantity = _positive(patch["quantity"], "quantity")
    if "sale_price" in patch:
        record.sale_price = _positive(patch["sale_price"], "sale_price")
    if "payment_status" in patch:
        record.payment_status = require_choice(patch["payment_status"], "payment_status", PAYMENT_STATUSES)
    if "source" in patch:
        record.source = require_text(patch["source"], "source")
    if "date" in patch:
        record.date = to_datetime(patch["date"], "date")

    if "quantity" in patch or "sale_price" in patch:
        record.total = Decimal(record.quantity) * Decimal(record.sale_price)

    db.session.commit()
    return record


def delete_gate_out(record_id: int) -> None:
    record = get_gate_out(record_id)
    db.session.delete(record)
    db.session.commit()
