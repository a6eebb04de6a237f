# Overview: Service-layer operations for attendance; encapsulates business logic and database work.

"""
Attendance Service

One record per (employee, calendar day). The duplicate pre-check looks for
any record whose `date` falls inside the day's [start, end) bounds; the
unique (employee_id, work_date) constraint backs it up.

check_in / check_out arrive as "HH:MM" or "HH:MM:SS" and are combined with
the attendance day.
"""

from datetime import datetime

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import AttendanceRecord, Employee
from ..validation import (
    ConflictError,
    ValidationError,
    require_choice,
    to_datetime,
    to_int,
)
from .batch import BatchReport, Skipped, run_batch
from .employee_service import get_employee
from backoffice.time_utils import day_bounds, month_bounds, parse_time_of_day


ATTENDANCE_STATUSES = ("present", "absent", "late", "half-day", "leave")


def _clock(value, field: str, day) -> datetime | None:
    if value in (None, ""):
        return None
    try:
        t = parse_time_of_day(value)
    except ValueError:
        raise ValidationError(f"{field} must be HH:MM or HH:MM:SS")
    return datetime.combine(day, t)


def _day_taken(employee_id: int, day) -> bool:
    start, end = day_bounds(day)
    return db.session.query(AttendanceRecord.id).filter(
        AttendanceRecord.employee_id == employee_id,
        AttendanceRecord.date >= start,
        AttendanceRecord.date < end,
    ).first() is not None


class _Mark:
    """Validated attendance fields shared by single and bulk creates."""

    def __init__(self, *, date, status, check_in=None, check_out=None, notes=None):
        if date in (None, "") or status in (None, ""):
            raise ValidationError("Employee ID, date, and status are required")
        self.date = to_datetime(date, "date")
        self.day = self.date.date()
        self.status = require_choice(status, "status", ATTENDANCE_STATUSES)
        self.check_in = _clock(check_in, "check_in", self.day)
        self.check_out = _clock(check_out, "check_out", self.day)
        if self.check_in and self.check_out and self.check_out < self.check_in:
            raise ValidationError("check_out cannot be before check_in")
        self.notes = (str(notes).strip() or None) if notes is not None else None

    def record_for(self, employee_id: int) -> AttendanceRecord:
        return AttendanceRecord(
            employee_id=employee_id,
            date=self.date,
            work_date=self.day,
            status=self.status,
            check_in=self.check_in,
            check_out=self.check_out,
            notes=self.notes,
        )


def list_attendances(*, month=None, year=None, employee_id=None) -> list[AttendanceRecord]:
    """Newest first; month and year together restrict to that calendar month."""
    q = db.session.query(AttendanceRecord)
    if month not in (None, "") and year not in (None, ""):
        month = to_int(month, "month")
        year = to_int(year, "year")
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        start, end = month_bounds(year, month)
        q = q.filter(AttendanceRecord.date >= start, AttendanceRecord.date < end)
    if employee_id not in (None, ""):
        q = q.filter(AttendanceRecord.employee_id == to_int(employee_id, "employee_id"))
    return q.order_by(AttendanceRecord.date.desc(), AttendanceRecord.id.desc()).all()


def create_attendance(*, employee_id, date, status, check_in=None, check_out=None, notes=None) -> AttendanceRecord:
    """
    Raises:
        ValidationError: missing or malformed field
        NotFoundError: employee does not exist
        ConflictError: the employee already has a record that day
    """
    if employee_id in (None, ""):
        raise ValidationError("Employee ID, date, and status are required")
    mark = _Mark(date=date, status=status, check_in=check_in, check_out=check_out, notes=notes)
    employee = get_employee(to_int(employee_id, "employee_id"))

    if _day_taken(employee.id, mark.day):
        raise ConflictError("Attendance already recorded for this date")

    record = mark.record_for(employee.id)
    db.session.add(record)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Attendance already recorded for this date")
    return record


def create_bulk_attendances(*, employees, date, status, check_in=None, check_out=None, notes=None) -> BatchReport:
    if not isinstance(employees, list) or not employees:
        raise ValidationError("Employees list, date, and status are required")
    mark = _Mark(date=date, status=status, check_in=check_in, check_out=check_out, notes=notes)

    def _one(raw_id):
        try:
            employee_id = to_int(raw_id, "employee_id")
        except ValidationError:
            return Skipped(raw_id, "Invalid employee id")
        if not db.session.get(Employee, employee_id):
            return Skipped(employee_id, "Employee not found")
        if _day_taken(employee_id, mark.day):
            return Skipped(employee_id, "Attendance already recorded for this date")
        return mark.record_for(employee_id)

    return run_batch(employees, _one, label="attendances")
