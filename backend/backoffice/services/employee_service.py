# Overview: Service-layer operations for the employee directory; encapsulates business logic and database work.

"""
Employee Service

- employee_number is allocated from the atomic "employee_number" counter
- contact is 10-15 digits and unique; email is optional, lower-cased, unique
- deletion is soft: status becomes "inactive" and history keeps resolving

Create validates every field it can and reports them together in a
per-field `errors` map; updates fail on the first bad field.
"""

import re

from sqlalchemy import or_

from ..extensions import db
from ..models import Employee
from ..validation import (
    NotFoundError,
    ValidationError,
    is_valid_email,
    require_choice,
    to_amount,
    to_datetime,
)
from .sequence_service import EMPLOYEE_NUMBER, next_value
from backoffice.time_utils import utcnow


CONTACT_RE = re.compile(r"^[0-9]{10,15}$")

EMPLOYEE_STATUSES = ("active", "inactive")

REQUIRED_FIELDS = ("name", "position", "department", "basic_salary", "contact")

UPDATABLE_FIELDS = {
    "name",
    "position",
    "department",
    "basic_salary",
    "join_date",
    "contact",
    "email",
    "status",
    "avatar",
}

SORTABLE_COLUMNS = {
    "join_date": Employee.join_date,
    "name": Employee.name,
    "employee_number": Employee.employee_number,
    "basic_salary": Employee.basic_salary,
    "created_at": Employee.created_at,
}


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _normalize_email(value) -> str | None:
    if _blank(value):
        return None
    return str(value).strip().lower()


def _contact_taken(contact: str, exclude_id: int | None = None) -> bool:
    q = db.session.query(Employee.id).filter(Employee.contact == contact)
    if exclude_id is not None:
        q = q.filter(Employee.id != exclude_id)
    return q.first() is not None


def _email_taken(email: str, exclude_id: int | None = None) -> bool:
    q = db.session.query(Employee.id).filter(Employee.email == email)
    if exclude_id is not None:
        q = q.filter(Employee.id != exclude_id)
    return q.first() is not None


def _clean_salary(value):
    amount = to_amount(value, "basic_salary")
    if amount < 0:
        raise ValidationError("basic_salary must be >= 0")
    return amount


def _clean_join_date(value):
    joined = to_datetime(value, "join_date")
    if joined > utcnow():
        raise ValidationError("join_date cannot be in the future")
    return joined


def get_employee(employee_id) -> Employee:
    employee = db.session.get(Employee, employee_id)
    if not employee:
        raise NotFoundError("Employee not found")
    return employee


def list_employees(
    *,
    search: str | None = None,
    status: str | None = None,
    sort_by: str = "join_date",
    sort_direction: str = "desc",
) -> list[Employee]:
    q = db.session.query(Employee)
    if status:
        q = q.filter(Employee.status == status)
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(or_(
            Employee.name.ilike(like),
            Employee.position.ilike(like),
            Employee.department.ilike(like),
            Employee.email.ilike(like),
        ))

    column = SORTABLE_COLUMNS.get(sort_by)
    if column is None:
        raise ValidationError(f"sort_by must be one of: {', '.join(SORTABLE_COLUMNS)}")
    order = column.asc() if sort_direction == "asc" else column.desc()
    return q.order_by(order, Employee.id.asc()).all()


def create_employee(payload: dict) -> Employee:
    """
    Create an employee and assign the next employee number.

    Raises:
        ValidationError: with `errors` naming every offending field
    """
    errors = {}
    for field in REQUIRED_FIELDS:
        if _blank(payload.get(field)):
            errors[field] = f"{field} is required"
    if errors:
        raise ValidationError("Validation failed", errors=errors)

    unknown = set(payload) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Field not allowed: {sorted(unknown)[0]}")

    contact = str(payload["contact"]).strip()
    email = _normalize_email(payload.get("email"))

    if email is not None:
        if not is_valid_email(email):
            errors["email"] = "Invalid email format"
        elif _email_taken(email):
            errors["email"] = "Email already exists"

    if not CONTACT_RE.match(contact):
        errors["contact"] = "Contact must be 10-15 digits"
    elif _contact_taken(contact):
        errors["contact"] = "Contact number already exists"

    try:
        basic_salary = _clean_salary(payload["basic_salary"])
    except ValidationError as e:
        errors["basic_salary"] = str(e)

    join_date = utcnow()
    if not _blank(payload.get("join_date")):
        try:
            join_date = _clean_join_date(payload["join_date"])
        except ValidationError as e:
            errors["join_date"] = str(e)

    status = payload.get("status") or "active"
    if status not in EMPLOYEE_STATUSES:
        errors["status"] = f"status must be one of: {', '.join(EMPLOYEE_STATUSES)}"

    name = str(payload["name"]).strip()
    if len(name) > 100:
        errors["name"] = "name cannot exceed 100 characters"

    if errors:
        raise ValidationError("Validation failed", errors=errors)

    employee = Employee(
        employee_number=next_value(EMPLOYEE_NUMBER),
        name=name,
        position=str(payload["position"]).strip(),
        department=str(payload["department"]).strip(),
        basic_salary=basic_salary,
        join_date=join_date,
        contact=contact,
        email=email,
        status=status,
        avatar=payload.get("avatar") or None,
    )
    db.session.add(employee)
    db.session.commit()
    return employee


def update_employee(employee_id: int, patch: dict) -> Employee:
    employee = get_employee(employee_id)

    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Field not allowed: {sorted(unknown)[0]}")

    if "email" in patch:
        email = _normalize_email(patch["email"])
        if email is not None:
            if not is_valid_email(email):
                raise ValidationError("Invalid email format", errors={"email": "Invalid email format"})
            if _email_taken(email, exclude_id=employee.id):
                raise ValidationError("Email already exists", errors={"email": "Email already exists"})
        employee.email = email

    if "contact" in patch:
        contact = "" if patch["contact"] is None else str(patch["contact"]).strip()
        if not CONTACT_RE.match(contact):
            raise ValidationError("Invalid contact number format", errors={"contact": "Contact must be 10-15 digits"})
        if _contact_taken(contact, exclude_id=employee.id):
            raise ValidationError("Contact number already exists", errors={"contact": "Contact number already exists"})
        employee.contact = contact

    for field in ("name", "position", "department"):
        if field in patch:
            if _blank(patch[field]):
                raise ValidationError(f"{field} cannot be blank")
            setattr(employee, field, str(patch[field]).strip())

    if "basic_salary" in patch:
        employee.basic_salary = _clean_salary(patch["basic_salary"])
    if "join_date" in patch:
        employee.join_date = _clean_join_date(patch["join_date"])
    if "status" in patch:
        employee.status = require_choice(patch["status"], "status", EMPLOYEE_STATUSES)
    if "avatar" in patch:
        employee.avatar = patch["avatar"] or None

    db.session.commit()
    return employee


def deactivate_employee(employee_id: int) -> Employee:
    employee = get_employee(employee_id)
    employee.status = "inactive"
    db.session.commit()
    return employee


def check_contact(contact: str) -> dict:
    employee = (
        db.session.query(Employee).filter(Employee.contact == (contact or "").strip()).first()
    )
    return {
        "exists": employee is not None,
        "employee_id": employee.id if employee else None,
    }
