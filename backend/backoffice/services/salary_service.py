# Overview: Service-layer operations for salary slips; encapsulates business logic and database work.

"""
Salary Service

net_salary = basic_salary + allowances - deductions + bonuses, where
basic_salary is snapshotted from the employee when the slip is created.
A client-supplied net_salary must agree within NET_TOLERANCE.

One slip per (employee, month, year): single creates reject a duplicate
period, bulk creates skip it.
"""

from decimal import Decimal

from ..extensions import db
from ..models import Employee, SalaryRecord
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    require_choice,
    to_amount,
    to_int,
)
from .batch import BatchReport, Skipped, run_batch
from .employee_service import get_employee
from backoffice.time_utils import utcnow


SALARY_STATUSES = ("pending", "paid", "cancelled")

NET_TOLERANCE = Decimal("0.01")


def _clean_period(month, year) -> tuple[int, int]:
    if month in (None, "") or year in (None, ""):
        raise ValidationError("Employee ID, month, and year are required")
    month = to_int(month, "month")
    year = to_int(year, "year")
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    if not 2000 <= year <= 2100:
        raise ValidationError("year must be between 2000 and 2100")
    return month, year


def _component(value, field: str) -> Decimal:
    if value in (None, ""):
        return Decimal("0")
    amount = to_amount(value, field)
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0")
    return amount


def _period_taken(employee_id: int, month: int, year: int) -> bool:
    return db.session.query(SalaryRecord.id).filter_by(
        employee_id=employee_id, month=month, year=year
    ).first() is not None


def _build_record(employee: Employee, month: int, year: int, allowances, deductions, bonuses, net_salary=None) -> SalaryRecord:
    basic = Decimal(employee.basic_salary)
    computed = basic + allowances - deductions + bonuses
    if net_salary not in (None, ""):
        claimed = to_amount(net_salary, "net_salary")
        if abs(claimed - computed) > NET_TOLERANCE:
            raise ValidationError("net_salary does not match basic + allowances - deductions + bonuses")
    if computed < 0:
        raise ValidationError("net_salary cannot be negative")

    return SalaryRecord(
        employee_id=employee.id,
        month=month,
        year=year,
        basic_salary=basic,
        allowances=allowances,
        deductions=deductions,
        bonuses=bonuses,
        net_salary=computed,
        status="pending",
    )


def list_salaries(*, month=None, year=None) -> list[SalaryRecord]:
    q = db.session.query(SalaryRecord)
    if month not in (None, ""):
        q = q.filter(SalaryRecord.month == to_int(month, "month"))
    if year not in (None, ""):
        q = q.filter(SalaryRecord.year == to_int(year, "year"))
    return q.order_by(SalaryRecord.created_at.desc(), SalaryRecord.id.desc()).all()


def create_salary(
    *,
    employee_id,
    month,
    year,
    allowances=None,
    deductions=None,
    bonuses=None,
    net_salary=None,
) -> SalaryRecord:
    """
    Raises:
        ValidationError: bad period or amounts, net_salary mismatch
        NotFoundError: employee does not exist
        ConflictError: a slip already exists for the period
    """
    if employee_id in (None, ""):
        raise ValidationError("Employee ID, month, and year are required")
    month, year = _clean_period(month, year)
    allowances = _component(allowances, "allowances")
    deductions = _component(deductions, "deductions")
    bonuses = _component(bonuses, "bonuses")

    employee = get_employee(to_int(employee_id, "employee_id"))
    if _period_taken(employee.id, month, year):
        raise ConflictError("Salary record already exists for this month")

    record = _build_record(employee, month, year, allowances, deductions, bonuses, net_salary)
    db.session.add(record)
    db.session.commit()
    return record


def create_bulk_salaries(*, employees, month, year, allowances=None, deductions=None, bonuses=None) -> BatchReport:
    """
    One slip per listed employee for the period, committed together.

    Unknown employees and periods that already have a slip are skipped, not failed.
    """
    if not isinstance(employees, list) or not employees:
        raise ValidationError("Employees list, month, and year are required")
    month, year = _clean_period(month, year)
    allowances = _component(allowances, "allowances")
    deductions = _component(deductions, "deductions")
    bonuses = _component(bonuses, "bonuses")

    def _one(raw_id):
        try:
            employee_id = to_int(raw_id, "employee_id")
        except ValidationError:
            return Skipped(raw_id, "Invalid employee id")
        employee = db.session.get(Employee, employee_id)
        if not employee:
            return Skipped(employee_id, "Employee not found")
        if _period_taken(employee.id, month, year):
            return Skipped(employee_id, "Salary record already exists for this month")
        try:
            return _build_record(employee, month, year, allowances, deductions, bonuses)
        except ValidationError as e:
            return Skipped(employee_id, str(e))

    return run_batch(employees, _one, label="salaries")


def update_salary_status(salary_id: int, status) -> SalaryRecord:
    """Setting "paid" stamps payment_date with the current time; any other status clears it."""
    status = require_choice(status, "status", SALARY_STATUSES)
    record = db.session.get(SalaryRecord, salary_id)
    if not record:
        raise NotFoundError("Salary record not found")

    record.status = status
    record.payment_date = utcnow() if status == "paid" else None
    db.session.commit()
    return record
