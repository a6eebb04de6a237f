from __future__ import annotations

from ..extensions import db
from backoffice.time_utils import to_iso_date, to_utc_z, utcnow
from backoffice.validation import amount_out


class Department(db.Model):
    """
    Department names offered to the employee directory.

    Persisted configuration: seeded at `flask system init`, shared by every
    process that talks to the same database.
    """
    __tablename__ = "departments"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


class Employee(db.Model):
    """
    Employee directory entry.

    employee_number is allocated from the "employee_number" counter on first save.
    Deletion is soft: status flips to "inactive" so salary/advance/attendance
    history keeps resolving.
    """
    __tablename__ = "employees"
    __table_args__ = (
        db.Index("ix_employees_join_date", "join_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_number = db.Column(db.Integer, nullable=False, unique=True)

    name = db.Column(db.String(100), nullable=False)
    position = db.Column(db.String(128), nullable=False)
    department = db.Column(db.String(128), nullable=False, index=True)
    basic_salary = db.Column(db.Numeric(12, 2), nullable=False)
    join_date = db.Column(db.DateTime, nullable=False, default=utcnow)

    # 10-15 digits, unique
    contact = db.Column(db.String(15), nullable=False, unique=True)
    # Lower-cased, unique when present
    email = db.Column(db.String(255), nullable=True, unique=True)

    # active | inactive
    status = db.Column(db.String(16), nullable=False, default="active", index=True)
    avatar = db.Column(db.String(512), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def summary(self) -> dict:
        """Employee fields echoed into salary/advance/attendance listings."""
        return {
            "employee_name": self.name,
            "employee_position": self.position,
            "department": self.department,
            "employee_avatar": self.avatar,
            "employee_contact": self.contact,
            "employee_email": self.email,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_number": self.employee_number,
            "name": self.name,
            "position": self.position,
            "department": self.department,
            "basic_salary": amount_out(self.basic_salary),
            "join_date": to_utc_z(self.join_date),
            "contact": self.contact,
            "email": self.email,
            "status": self.status,
            "avatar": self.avatar,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class SalaryRecord(db.Model):
    """
    Monthly salary slip.

    net_salary == basic_salary + allowances - deductions + bonuses (within 0.01).
    basic_salary is a snapshot of the employee's salary when the slip was created.
    payment_date is only set once status becomes "paid".
    """
    __tablename__ = "salary_records"
    __table_args__ = (
        db.UniqueConstraint("employee_id", "month", "year", name="uq_salary_employee_period"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)

    month = db.Column(db.Integer, nullable=False)
    year = db.Column(db.Integer, nullable=False)

    basic_salary = db.Column(db.Numeric(12, 2), nullable=False)
    allowances = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    deductions = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    bonuses = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    net_salary = db.Column(db.Numeric(12, 2), nullable=False)

    # pending | paid | cancelled
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    payment_date = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    employee = db.relationship("Employee", backref=db.backref("salary_records", lazy=True))

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "employee_id": self.employee_id,
            "month": self.month,
            "year": self.year,
            "basic_salary": amount_out(self.basic_salary),
            "allowances": amount_out(self.allowances),
            "deductions": amount_out(self.deductions),
            "bonuses": amount_out(self.bonuses),
            "net_salary": amount_out(self.net_salary),
            "status": self.status,
            "payment_date": to_utc_z(self.payment_date) if self.payment_date else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if self.employee is not None:
            data.update(self.employee.summary())
        return data


class Advance(db.Model):
    """
    Cash advance paid to an employee, repaid in installments.

    sum(repayments.amount) <= amount, checked when a repayment is appended.
    """
    __tablename__ = "advances"
    __table_args__ = (
        db.Index("ix_advances_employee_status", "employee_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    date = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    reason = db.Column(db.Text, nullable=False)

    # pending | approved | rejected
    status = db.Column(db.String(16), nullable=False, default="pending")

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    employee = db.relationship("Employee", backref=db.backref("advances", lazy=True))
    repayments = db.relationship(
        "AdvanceRepayment",
        backref="advance",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="AdvanceRepayment.id",
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def total_repaid(self):
        return sum((r.amount for r in self.repayments), start=0)

    @property
    def remaining(self):
        return self.amount - self.total_repaid

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "employee_id": self.employee_id,
            "amount": amount_out(self.amount),
            "date": to_utc_z(self.date),
            "reason": self.reason,
            "status": self.status,
            "repayments": [r.to_dict() for r in self.repayments],
            "total_repaid": amount_out(self.total_repaid),
            "remaining": amount_out(self.remaining),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if self.employee is not None:
            data.update(self.employee.summary())
        return data


class AdvanceRepayment(db.Model):
    __tablename__ = "advance_repayments"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    advance_id = db.Column(
        db.Integer,
        db.ForeignKey("advances.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    date = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount": amount_out(self.amount),
            "date": to_utc_z(self.date),
        }


class AttendanceRecord(db.Model):
    """
    One attendance mark per employee per calendar day.

    work_date mirrors the calendar day of `date` and backs the unique constraint;
    the service also pre-checks with day-start/day-end bounds.
    """
    __tablename__ = "attendance_records"
    __table_args__ = (
        db.UniqueConstraint("employee_id", "work_date", name="uq_attendance_employee_day"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)

    date = db.Column(db.DateTime, nullable=False, index=True)
    work_date = db.Column(db.Date, nullable=False)

    # present | absent | late | half-day | leave
    status = db.Column(db.String(16), nullable=False)

    check_in = db.Column(db.DateTime, nullable=True)
    check_out = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    employee = db.relationship("Employee", backref=db.backref("attendance_records", lazy=True))

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "employee_id": self.employee_id,
            "date": to_utc_z(self.date),
            "work_date": to_iso_date(self.work_date),
            "status": self.status,
            "check_in": to_utc_z(self.check_in) if self.check_in else None,
            "check_out": to_utc_z(self.check_out) if self.check_out else None,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if self.employee is not None:
            data.update(self.employee.summary())
        return data
