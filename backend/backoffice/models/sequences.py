from __future__ import annotations

from ..extensions import db
from backoffice.time_utils import to_utc_z, utcnow


class Counter(db.Model):
    """
    Persisted named sequence.

    One row per sequence domain (employee numbers, gate-in invoices, ...).
    Mutated only by an atomic UPDATE ... SET value = value + 1, never read-then-write.
    Counters are never deleted.
    """
    __tablename__ = "counters"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False, unique=True)

    # Last value handed out
    value = db.Column(db.Integer, nullable=False, default=0)

    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Counter name={self.name!r} value={self.value}>"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "value": self.value,
            "updated_at": to_utc_z(self.updated_at),
        }
