from __future__ import annotations

from ..extensions import db
from backoffice.time_utils import to_utc_z, utcnow


class Vendor(db.Model):
    """
    Supplier of raw material.

    Referenced by GateInRecord.vendor_id. Email and phone are unique across vendors.
    Hard-deleted; gate-in records keep their vendor_id even if the vendor is gone.
    """
    __tablename__ = "vendors"
    __table_args__ = (
        db.Index("ix_vendors_name_email_status", "name", "email", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    phone = db.Column(db.String(32), nullable=False, unique=True)
    address = db.Column(db.Text, nullable=False)
    company = db.Column(db.String(255), nullable=True)

    # Active | Inactive
    status = db.Column(db.String(16), nullable=False, default="Active", index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Vendor id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "company": self.company,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Customer(db.Model):
    """
    Customer master data.

    Invoices reference a customer by id and also embed a snapshot of its
    contact fields taken at write time, so later edits here never rewrite history.
    """
    __tablename__ = "customers"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    address = db.Column(db.Text, nullable=False)

    # Active | Inactive
    status = db.Column(db.String(16), nullable=False, default="Active", index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def snapshot(self) -> dict:
        """Point-in-time copy embedded into invoices."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
