# Overview: Service-layer operations for cash advances; encapsulates business logic and database work.

"""
Advance Service

INVARIANT: sum(repayments.amount) <= amount, checked when a repayment is
appended. A repayment that would break it is rejected and the advance is
left untouched.
"""

from decimal import Decimal

from ..extensions import db
from ..models import Advance, AdvanceRepayment
from ..validation import (
    NotFoundError,
    ValidationError,
    require_choice,
    require_text,
    to_amount,
    to_datetime,
    to_int,
)
from .concurrency import lock_row, run_with_retry
from .employee_service import get_employee
from backoffice.time_utils import utcnow


ADVANCE_STATUSES = ("pending", "approved", "rejected")


def _positive(value, field: str) -> Decimal:
    if value in (None, ""):
        raise ValidationError(f"{field} is required")
    amount = to_amount(value, field)
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than 0")
    return amount


def list_advances(*, employee_id=None, status=None) -> list[Advance]:
    q = db.session.query(Advance)
    if employee_id not in (None, ""):
        q = q.filter(Advance.employee_id == to_int(employee_id, "employee_id"))
    if status:
        q = q.filter(Advance.status == status)
    return q.order_by(Advance.created_at.desc(), Advance.id.desc()).all()


def create_advance(*, employee_id, amount, reason, date=None) -> Advance:
    if employee_id in (None, ""):
        raise ValidationError("Employee ID, amount, and reason are required")
    value = _positive(amount, "amount")
    reason = require_text(reason, "reason")
    employee = get_employee(to_int(employee_id, "employee_id"))

    advance = Advance(
        employee_id=employee.id,
        amount=value,
        reason=reason,
        date=to_datetime(date, "date") if date not in (None, "") else utcnow(),
        status="pending",
    )
    db.session.add(advance)
    db.session.commit()
    return advance


def update_advance_status(advance_id: int, status) -> Advance:
    status = require_choice(status, "status", ADVANCE_STATUSES)
    advance = db.session.get(Advance, advance_id)
    if not advance:
        raise NotFoundError("Advance not found")
    advance.status = status
    db.session.commit()
    return advance


def add_repayment(advance_id, *, amount, date=None) -> Advance:
    """
    Append a repayment if it fits in the remaining balance.

    Raises:
        ValidationError: non-positive amount, or amount > remaining
        NotFoundError: advance does not exist
    """
    if advance_id in (None, ""):
        raise ValidationError("Advance ID and amount are required")
    advance_id = to_int(advance_id, "advance_id")
    value = _positive(amount, "amount")
    when = to_datetime(date, "date") if date not in (None, "") else utcnow()

    def _op() -> Advance:
        advance = lock_row(Advance, advance_id)
        if not advance:
            raise NotFoundError("Advance not found")
        if Decimal(advance.total_repaid) + value > Decimal(advance.amount):
            raise ValidationError("Repayment amount exceeds remaining balance")

        advance.repayments.append(AdvanceRepayment(amount=value, date=when))
        # Touch the row so version_id advances with every repayment
        advance.updated_at = utcnow()
        db.session.commit()
        return advance

    return run_with_retry(_op, label=f"Repayment on advance {advance_id}")
