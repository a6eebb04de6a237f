from __future__ import annotations

from ..extensions import db
from backoffice.time_utils import to_iso_date, to_utc_z, utcnow
from backoffice.validation import amount_out


class MonthlyExpense(db.Model):
    """
    Monthly expense bucket, one per "YYYY-MM".

    Holds at most one entry per calendar day; a daily transfer overwrites
    that day's amount. Buckets are upserted, never deleted.
    """
    __tablename__ = "monthly_expenses"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    year_month = db.Column(db.String(7), nullable=False, unique=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    entries = db.relationship(
        "MonthlyExpenseEntry",
        backref="bucket",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="MonthlyExpenseEntry.entry_date",
    )

    @property
    def total(self):
        return sum((e.amount for e in self.entries), start=0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "year_month": self.year_month,
            "entries": [e.to_dict() for e in self.entries],
            "total": amount_out(self.total),
            "updated_at": to_utc_z(self.updated_at),
        }


class MonthlyExpenseEntry(db.Model):
    __tablename__ = "monthly_expense_entries"
    __table_args__ = (
        db.UniqueConstraint("monthly_expense_id", "entry_date", name="uq_monthly_entry_day"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    monthly_expense_id = db.Column(
        db.Integer,
        db.ForeignKey("monthly_expenses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    entry_date = db.Column(db.Date, nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)

    def to_dict(self) -> dict:
        return {
            "date": to_iso_date(self.entry_date),
            "amount": amount_out(self.amount),
        }


class YearlyExpense(db.Model):
    """
    Yearly expense bucket: one entry per "YYYY-MM", each a full recompute of
    that month's bucket total (overwrite, never increment).
    """
    __tablename__ = "yearly_expenses"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    year = db.Column(db.Integer, nullable=False, unique=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    expenses = db.relationship(
        "YearlyExpenseEntry",
        backref="bucket",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="YearlyExpenseEntry.month",
    )

    def entry_for(self, year_month: str) -> "YearlyExpenseEntry | None":
        for entry in self.expenses:
            if entry.month == year_month:
                return entry
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "year": self.year,
            "expenses": [e.to_dict() for e in self.expenses],
            "updated_at": to_utc_z(self.updated_at),
        }


class YearlyExpenseEntry(db.Model):
    __tablename__ = "yearly_expense_entries"
    __table_args__ = (
        db.UniqueConstraint("yearly_expense_id", "month", name="uq_yearly_entry_month"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    yearly_expense_id = db.Column(
        db.Integer,
        db.ForeignKey("yearly_expenses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # "YYYY-MM"
    month = db.Column(db.String(7), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "amount": amount_out(self.amount),
        }
