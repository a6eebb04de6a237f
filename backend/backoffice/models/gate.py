from __future__ import annotations

from ..extensions import db
from backoffice.time_utils import to_utc_z, utcnow
from backoffice.validation import amount_out


class GateInRecord(db.Model):
    """
    Incoming raw-material invoice.

    INVARIANTS:
    - total_amount == sum(item.total) as computed at create time
    - payment_status is re-derived after every payment append:
      Paid if paid >= total, Partial if 0 < paid < total, Pending while nothing is paid

    A direct update (PUT) merges fields verbatim and does not recompute
    total_amount or payment_status; callers supply consistent values.

    vendor_id is a plain reference (no FK) so vendor deletion leaves history intact.
    """
    __tablename__ = "gate_in_records"
    __table_args__ = (
        db.Index("ix_gate_in_vendor_date", "vendor_id", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-facing number from the "gate_in_invoice" counter (starts at 1000)
    invoice_number = db.Column(db.Integer, nullable=False, unique=True)

    vendor_id = db.Column(db.Integer, nullable=False, index=True)

    total_amount = db.Column(db.Numeric(14, 4), nullable=False, default=0)

    # Paid | Partial | Pending
    payment_status = db.Column(db.String(16), nullable=False, default="Pending", index=True)

    date = db.Column(db.DateTime, nullable=False, default=utcnow)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    items = db.relationship(
        "GateInItem",
        backref="record",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="GateInItem.id",
    )
    payments = db.relationship(
        "GateInPayment",
        backref="record",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="GateInPayment.id",
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def amount_paid(self):
        return sum((p.amount for p in self.payments), start=0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "vendor_id": self.vendor_id,
            "items": [item.to_dict() for item in self.items],
            "total_amount": amount_out(self.total_amount),
            "amount_paid": amount_out(self.amount_paid),
            "payment_status": self.payment_status,
            "date": to_utc_z(self.date),
            "payments": [p.to_dict() for p in self.payments],
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }


class GateInItem(db.Model):
    """One line of a gate-in invoice. total = quantity * unit_price, kept exact (4 places)."""
    __tablename__ = "gate_in_items"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    record_id = db.Column(
        db.Integer,
        db.ForeignKey("gate_in_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = db.Column(db.String(255), nullable=False)
    units = db.Column(db.String(32), nullable=False)
    quantity = db.Column(db.Numeric(12, 2), nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    total = db.Column(db.Numeric(14, 4), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "units": self.units,
            "quantity": amount_out(self.quantity),
            "unit_price": amount_out(self.unit_price),
            "total": amount_out(self.total),
        }


class GateInPayment(db.Model):
    """Append-only payment against a gate-in invoice."""
    __tablename__ = "gate_in_payments"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    record_id = db.Column(
        db.Integer,
        db.ForeignKey("gate_in_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    date = db.Column(db.DateTime, nullable=False, default=utcnow)

    # Cash | BankTransfer | Cheque | Other
    method = db.Column(db.String(16), nullable=False)
    reference = db.Column(db.String(128), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount": amount_out(self.amount),
            "date": to_utc_z(self.date),
            "method": self.method,
            "reference": self.reference,
        }


class GateOutRecord(db.Model):
    """
    Outgoing goods entry: a single implicit line (quantity * sale_price).

    No payment sub-ledger; payment_status is set by the caller.
    """
    __tablename__ = "gate_out_records"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-facing number from the "gate_out_invoice" counter (starts at 1)
    invoice = db.Column(db.Integer, nullable=False, unique=True)

    item_name = db.Column(db.String(255), nullable=False)
    units = db.Column(db.String(32), nullable=False)
    quantity = db.Column(db.Numeric(12, 2), nullable=False)
    sale_price = db.Column(db.Numeric(12, 2), nullable=False)
    total = db.Column(db.Numeric(14, 4), nullable=False)

    # Paid | Overdue | Pending
    payment_status = db.Column(db.String(16), nullable=False, index=True)

    date = db.Column(db.DateTime, nullable=False, default=utcnow)

    # Where the goods left from
    source = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice": self.invoice,
            "item_name": self.item_name,
            "units": self.units,
            "quantity": amount_out(self.quantity),
            "sale_price": amount_out(self.sale_price),
            "total": amount_out(self.total),
            "payment_status": self.payment_status,
            "date": to_utc_z(self.date),
            "source": self.source,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
