# Overview: Service-layer operations for the expense roll-up; encapsulates aggregation and database work.

"""
Expense Roll-Up Service

Three tiers:
- daily: held by the client, never stored here
- monthly: one MonthlyExpense bucket per "YYYY-MM", one entry per day
- yearly: one YearlyExpense bucket per year, one entry per "YYYY-MM"

transfer_daily_to_monthly() overwrites each touched day's entry with that
day's total, then always re-rolls the touched months into their yearly
buckets. transfer_monthly_to_yearly() recomputes a month's total from its
monthly bucket and overwrites the yearly entry, so running it again for
the same month is a no-op.
"""

from __future__ import annotations

from collections import OrderedDict
from decimal import Decimal

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import MonthlyExpense, MonthlyExpenseEntry, YearlyExpense, YearlyExpenseEntry
from ..validation import ValidationError, amount_out, to_amount, to_date, to_int
from backoffice.time_utils import previous_month, utcnow, year_month_key


def _monthly_bucket(year_month: str, *, create: bool) -> MonthlyExpense | None:
    bucket = db.session.query(MonthlyExpense).filter_by(year_month=year_month).first()
    if bucket is None and create:
        bucket = MonthlyExpense(year_month=year_month)
        db.session.add(bucket)
    return bucket


def _yearly_bucket(year: int, *, create: bool) -> YearlyExpense | None:
    bucket = db.session.query(YearlyExpense).filter_by(year=year).first()
    if bucket is None and create:
        bucket = YearlyExpense(year=year)
        db.session.add(bucket)
    return bucket


def _daily_totals(entries) -> OrderedDict:
    """Sum entry amounts per calendar day, in first-seen order."""
    totals: OrderedDict = OrderedDict()
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValidationError(f"entries[{idx}] must be an object")
        raw_amount = entry.get("amount")
        if isinstance(raw_amount, bool) or not isinstance(raw_amount, (int, float, Decimal)):
            raise ValidationError("All entries must have a positive amount")
        amount = to_amount(raw_amount, "amount")
        if amount <= 0:
            raise ValidationError("All entries must have a positive amount")
        if entry.get("date") in (None, ""):
            raise ValidationError("All entries must have a valid date")
        try:
            day = to_date(entry["date"], "date")
        except ValidationError:
            raise ValidationError("All entries must have a valid date")
        totals[day] = totals.get(day, Decimal("0")) + amount
    return totals


def _roll_month_into_year(year: int, month: int) -> YearlyExpense | None:
    """Overwrite the yearly entry for (year, month) with the monthly bucket's total."""
    year_month = year_month_key(year, month)
    monthly = _monthly_bucket(year_month, create=False)
    if monthly is None or not monthly.entries:
        current_app.logger.info("No monthly expenses found for %s", year_month)
        return None

    month_total = sum((Decimal(e.amount) for e in monthly.entries), Decimal("0"))

    yearly = _yearly_bucket(year, create=True)
    entry = yearly.entry_for(year_month)
    if entry is None:
        yearly.expenses.append(YearlyExpenseEntry(month=year_month, amount=month_total))
    else:
        entry.amount = month_total
    db.session.flush()
    return yearly


def transfer_daily_to_monthly(*, date, entries) -> dict:
    """
    Move one day's client-side entries into the monthly tier.

    Each affected day's entry is replaced by that day's total; every
    affected month is then rolled into its yearly bucket.

    Raises:
        ValidationError: missing date, empty entries, non-positive amount, bad date
    """
    if date in (None, "") or not isinstance(entries, list) or not entries:
        raise ValidationError("Date and valid entries are required")
    to_date(date, "date")

    totals = _daily_totals(entries)

    touched_months: OrderedDict = OrderedDict()
    for day, amount in totals.items():
        year_month = year_month_key(day.year, day.month)
        bucket = _monthly_bucket(year_month, create=True)
        existing = next((e for e in bucket.entries if e.entry_date == day), None)
        if existing is None:
            bucket.entries.append(MonthlyExpenseEntry(entry_date=day, amount=amount))
        else:
            existing.amount = amount
        touched_months[year_month] = (day.year, day.month)
    db.session.flush()

    buckets = []
    for year_month, (year, month) in touched_months.items():
        _roll_month_into_year(year, month)
        buckets.append(_monthly_bucket(year_month, create=False))

    db.session.commit()
    current_app.logger.info(
        "Transferred %s day(s) into %s", len(totals), ", ".join(touched_months)
    )
    return {
        "message": "Transferred to monthly expenses",
        "transferred_months": list(touched_months),
        "monthly": [b.to_dict() for b in buckets],
    }


def transfer_monthly_to_yearly(year=None, month=None, *, today=None) -> dict:
    """
    Roll one month into its yearly bucket.

    With no year/month, the month before `today` (default: the current UTC
    date) is used; this is the scheduled end-of-month run.
    """
    if year in (None, "") and month in (None, ""):
        year, month = previous_month(today or utcnow().date())
    elif year in (None, "") or month in (None, ""):
        raise ValidationError("year and month must be given together")
    else:
        year = to_int(year, "year")
        month = to_int(month, "month")
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")

    year_month = year_month_key(year, month)
    yearly = _roll_month_into_year(year, month)
    db.session.commit()

    if yearly is None:
        return {"message": f"No expenses found for {year_month}", "year_month": year_month, "yearly": None}

    current_app.logger.info("Transferred expenses for %s to yearly", year_month)
    return {
        "message": f"Transferred expenses for {year_month} to yearly",
        "year_month": year_month,
        "yearly": yearly.to_dict(),
    }


def list_monthly(*, date_range: str | None = None) -> list[MonthlyExpense]:
    """
    Monthly buckets ascending by year_month.

    date_range is "start,end" (ISO dates); every bucket whose month overlaps
    the inclusive range is returned.
    """
    q = db.session.query(MonthlyExpense)
    if date_range:
        parts = [p.strip() for p in date_range.split(",")]
        if len(parts) != 2:
            raise ValidationError("Invalid date range")
        try:
            start = to_date(parts[0], "start")
            end = to_date(parts[1], "end")
        except ValidationError:
            raise ValidationError("Invalid date range")
        q = q.filter(
            MonthlyExpense.year_month >= year_month_key(start.year, start.month),
            MonthlyExpense.year_month <= year_month_key(end.year, end.month),
        )
    return q.order_by(MonthlyExpense.year_month.asc()).all()


def list_yearly(*, year=None) -> list[dict]:
    """Flattened yearly entries for one year (default: the current year)."""
    year = to_int(year, "year") if year not in (None, "") else utcnow().year
    bucket = _yearly_bucket(year, create=False)
    if bucket is None:
        return []
    return [
        {
            "id": bucket.id,
            "year": bucket.year,
            "month": entry.month,
            "amount": amount_out(entry.amount),
        }
        for entry in bucket.expenses
    ]


def get_expense_analytics() -> dict:
    """Per-month and per-year totals and entry counts across all buckets."""
    monthly_rows = (
        db.session.query(
            MonthlyExpense.year_month,
            func.sum(MonthlyExpenseEntry.amount),
            func.count(MonthlyExpenseEntry.id),
        )
        .join(MonthlyExpenseEntry, MonthlyExpenseEntry.monthly_expense_id == MonthlyExpense.id)
        .group_by(MonthlyExpense.year_month)
        .order_by(MonthlyExpense.year_month.asc())
        .all()
    )
    yearly_rows = (
        db.session.query(
            YearlyExpense.year,
            func.sum(YearlyExpenseEntry.amount),
            func.count(YearlyExpenseEntry.id),
        )
        .join(YearlyExpenseEntry, YearlyExpenseEntry.yearly_expense_id == YearlyExpense.id)
        .group_by(YearlyExpense.year)
        .order_by(YearlyExpense.year.asc())
        .all()
    )

    return {
        "monthly_stats": [
            {"year_month": ym, "total_amount": amount_out(total), "count": count}
            for ym, total, count in monthly_rows
        ],
        "yearly_stats": [
            {"year": year, "total_amount": amount_out(total), "count": count}
            for year, total, count in yearly_rows
        ],
    }
