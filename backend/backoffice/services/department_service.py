# Overview: Service-layer operations for departments; encapsulates business logic and database work.

from flask import current_app

from ..extensions import db
from ..models import Department, Employee
from ..validation import ConflictError, NotFoundError, require_text


def seed_default_departments(names=None) -> int:
    """Insert any missing default department. Returns how many were added."""
    names = names if names is not None else current_app.config["DEFAULT_DEPARTMENTS"]
    existing = {name for (name,) in db.session.query(Department.name).all()}
    added = 0
    for name in names:
        if name not in existing:
            db.session.add(Department(name=name))
            existing.add(name)
            added += 1
    db.session.commit()
    if added:
        current_app.logger.info("Seeded %s department(s)", added)
    return added


def list_departments() -> list[Department]:
    return db.session.query(Department).order_by(Department.id.asc()).all()


def add_department(name) -> Department:
    name = require_text(name, "department")
    if db.session.query(Department.id).filter(Department.name == name).first():
        raise ConflictError("Department already exists")
    department = Department(name=name)
    db.session.add(department)
    db.session.commit()
    return department


def delete_department(name: str) -> None:
    """Refused while any employee, active or not, still names the department."""
    department = db.session.query(Department).filter(Department.name == name).first()
    if not department:
        raise NotFoundError("Department not found")

    in_use = db.session.query(Employee).filter(Employee.department == name).count()
    if in_use:
        raise ConflictError(
            f"Cannot delete department with {in_use} employee(s). Reassign them first."
        )
    db.session.delete(department)
    db.session.commit()
