from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ..extensions import db
from backoffice.time_utils import to_utc_z, utcnow
from backoffice.validation import amount_out


INVOICE_STATUS_PAID = "Paid"
INVOICE_STATUS_PENDING = "Pending"
INVOICE_STATUS_OVERDUE = "Overdue"


def derive_invoice_status(due: Decimal, due_date: datetime | None, now: datetime) -> str:
    """Paid once nothing is due; otherwise Overdue past the due date, else Pending."""
    if due <= 0:
        return INVOICE_STATUS_PAID
    if due_date is not None and due_date < now:
        return INVOICE_STATUS_OVERDUE
    return INVOICE_STATUS_PENDING


class Invoice(db.Model):
    """
    Sales invoice.

    INVARIANTS (re-established on every create/update/payment):
    - subtotal == sum(quantity * price) over line items
    - total == subtotal + tax - discount
    - due == total - paid
    - status == derive_invoice_status(due, due_date, now)

    Status can drift while nobody writes (an invoice passes its due date),
    so to_dict() reports the status derived at read time and the persisted
    column is brought back in line by invoice_service.refresh_invoice_statuses().

    customer_* snapshot columns are copied from the Customer at write time and
    are never refreshed from it afterwards.
    """
    __tablename__ = "invoices"
    __table_args__ = (
        db.Index("ix_invoices_status_due_date", "status", "due_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # "INV-000001", allocated from the "invoice" counter
    invoice_number = db.Column(db.String(32), nullable=False, unique=True)

    date = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    due_date = db.Column(db.DateTime, nullable=False)

    customer_id = db.Column(db.Integer, nullable=False, index=True)

    # Customer snapshot taken at write time
    customer_name = db.Column(db.String(255), nullable=False)
    customer_email = db.Column(db.String(255), nullable=True)
    customer_phone = db.Column(db.String(32), nullable=True)
    customer_address = db.Column(db.Text, nullable=True)

    subtotal = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    tax = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    discount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    paid = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    due = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    # Paid | Pending | Overdue
    status = db.Column(db.String(16), nullable=False, default=INVOICE_STATUS_PENDING)

    # Cash | CreditCard | BankTransfer
    payment_method = db.Column(db.String(16), nullable=False)

    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    line_items = db.relationship(
        "InvoiceLineItem",
        backref="invoice",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.id",
    )
    payment_history = db.relationship(
        "InvoicePayment",
        backref="invoice",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="InvoicePayment.id",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def current_status(self, now: datetime | None = None) -> str:
        return derive_invoice_status(Decimal(self.due), self.due_date, now or utcnow())

    def customer_snapshot(self) -> dict:
        return {
            "id": self.customer_id,
            "name": self.customer_name,
            "email": self.customer_email,
            "phone": self.customer_phone,
            "address": self.customer_address,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "date": to_utc_z(self.date),
            "due_date": to_utc_z(self.due_date),
            "customer_id": self.customer_id,
            "customer_snapshot": self.customer_snapshot(),
            "line_items": [line.to_dict() for line in self.line_items],
            "subtotal": amount_out(self.subtotal),
            "tax": amount_out(self.tax),
            "discount": amount_out(self.discount),
            "total": amount_out(self.total),
            "paid": amount_out(self.paid),
            "due": amount_out(self.due),
            "status": self.current_status(),
            "payment_method": self.payment_method,
            "payment_history": [p.to_dict() for p in self.payment_history],
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }


class InvoiceLineItem(db.Model):
    __tablename__ = "invoice_line_items"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(
        db.Integer,
        db.ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=False)

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.quantity) * Decimal(self.price)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "price": amount_out(self.price),
            "line_total": amount_out(self.line_total),
        }


class InvoicePayment(db.Model):
    """Append-only payment history entry."""
    __tablename__ = "invoice_payments"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(
        db.Integer,
        db.ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    date = db.Column(db.DateTime, nullable=False, default=utcnow)
    method = db.Column(db.String(16), nullable=False)

    def to_dict(self) -> dict:
        return {
            "amount": amount_out(self.amount),
            "date": to_utc_z(self.date),
            "method": self.method,
        }
