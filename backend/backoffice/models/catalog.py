from __future__ import annotations

from ..extensions import db
from backoffice.time_utils import to_utc_z, utcnow
from backoffice.validation import amount_out


class RawProduct(db.Model):
    """Raw-material catalog entry picked from when recording gate-in items."""
    __tablename__ = "raw_products"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Numeric(12, 2), nullable=False)
    unit = db.Column(db.String(32), nullable=False)
    stock = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    category = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": amount_out(self.price),
            "unit": self.unit,
            "stock": amount_out(self.stock),
            "category": self.category,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Product(db.Model):
    """Finished-goods catalog entry. status tracks quantity unless set explicitly."""
    __tablename__ = "products"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(64), nullable=False, unique=True)
    category = db.Column(db.String(128), nullable=True)
    price = db.Column(db.Numeric(12, 2), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    # In Stock | Low Stock | Out of Stock
    status = db.Column(db.String(16), nullable=False, default="Out of Stock")
    image = db.Column(db.String(512), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "category": self.category,
            "price": amount_out(self.price),
            "quantity": self.quantity,
            "status": self.status,
            "image": self.image,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
