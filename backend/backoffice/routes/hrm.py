# Overview: Flask API routes for HR and payroll; parses input and returns JSON responses.

"""
HRM Routes

Employees, salary slips, cash advances, attendance and departments under
/api/hrm. Bulk endpoints answer 201 with a batch report:
{created_count, skipped_count, records: [...], skipped: [{employee_id, reason}]}
"""

from flask import Blueprint, jsonify, request

from ..decorators import handle_service_errors, json_body
from ..services import (
    advance_service,
    attendance_service,
    department_service,
    employee_service,
    salary_service,
)


hrm_bp = Blueprint("hrm", __name__, url_prefix="/api/hrm")


# =============================================================================
# Employees
# =============================================================================

@hrm_bp.get("/employees")
@handle_service_errors("list employees")
def list_employees_route():
    """
    Query parameters:
    - search: substring of name, position, department or email
    - status: active | inactive
    - sort_by: join_date (default) | name | employee_number | basic_salary | created_at
    - sort_direction: asc | desc (default)
    """
    employees = employee_service.list_employees(
        search=request.args.get("search"),
        status=request.args.get("status"),
        sort_by=request.args.get("sort_by", "join_date"),
        sort_direction=request.args.get("sort_direction", "desc"),
    )
    return jsonify([e.to_dict() for e in employees])


@hrm_bp.post("/employees")
@handle_service_errors("create employee")
def create_employee_route():
    employee = employee_service.create_employee(json_body())
    return jsonify(employee.to_dict()), 201


@hrm_bp.get("/employees/check-contact")
@handle_service_errors("check employee contact")
def check_contact_route():
    return jsonify(employee_service.check_contact(request.args.get("contact", "")))


@hrm_bp.put("/employees/<int:employee_id>")
@handle_service_errors("update employee")
def update_employee_route(employee_id: int):
    employee = employee_service.update_employee(employee_id, json_body())
    return jsonify(employee.to_dict())


@hrm_bp.delete("/employees/<int:employee_id>")
@handle_service_errors("deactivate employee")
def delete_employee_route(employee_id: int):
    employee_service.deactivate_employee(employee_id)
    return jsonify({"message": "Employee deactivated successfully"})


# =============================================================================
# Salaries
# =============================================================================

@hrm_bp.get("/salaries")
@handle_service_errors("list salaries")
def list_salaries_route():
    salaries = salary_service.list_salaries(
        month=request.args.get("month"),
        year=request.args.get("year"),
    )
    return jsonify([s.to_dict() for s in salaries])


@hrm_bp.post("/salaries")
@handle_service_errors("create salary")
def create_salary_route():
    data = json_body()
    record = salary_service.create_salary(
        employee_id=data.get("employee_id"),
        month=data.get("month"),
        year=data.get("year"),
        allowances=data.get("allowances"),
        deductions=data.get("deductions"),
        bonuses=data.get("bonuses"),
        net_salary=data.get("net_salary"),
    )
    return jsonify(record.to_dict()), 201


@hrm_bp.post("/salaries/bulk")
@handle_service_errors("create bulk salaries")
def create_bulk_salaries_route():
    data = json_body()
    report = salary_service.create_bulk_salaries(
        employees=data.get("employees"),
        month=data.get("month"),
        year=data.get("year"),
        allowances=data.get("allowances"),
        deductions=data.get("deductions"),
        bonuses=data.get("bonuses"),
    )
    return jsonify(report.to_dict()), 201


@hrm_bp.patch("/salaries/<int:salary_id>")
@handle_service_errors("update salary status")
def update_salary_status_route(salary_id: int):
    record = salary_service.update_salary_status(salary_id, json_body().get("status"))
    return jsonify(record.to_dict())


# =============================================================================
# Advances
# =============================================================================

@hrm_bp.get("/advances")
@handle_service_errors("list advances")
def list_advances_route():
    advances = advance_service.list_advances(
        employee_id=request.args.get("employee_id"),
        status=request.args.get("status"),
    )
    return jsonify([a.to_dict() for a in advances])


@hrm_bp.post("/advances")
@handle_service_errors("create advance")
def create_advance_route():
    data = json_body()
    advance = advance_service.create_advance(
        employee_id=data.get("employee_id"),
        amount=data.get("amount"),
        reason=data.get("reason"),
        date=data.get("date"),
    )
    return jsonify(advance.to_dict()), 201


@hrm_bp.patch("/advances/<int:advance_id>")
@handle_service_errors("update advance status")
def update_advance_status_route(advance_id: int):
    advance = advance_service.update_advance_status(advance_id, json_body().get("status"))
    return jsonify(advance.to_dict())


@hrm_bp.post("/advances/repay")
@handle_service_errors("add advance repayment")
def add_repayment_route():
    """Request body: {"advance_id": 1, "amount": 100, "date": "..."}"""
    data = json_body()
    advance = advance_service.add_repayment(
        data.get("advance_id"),
        amount=data.get("amount"),
        date=data.get("date"),
    )
    return jsonify(advance.to_dict())


# =============================================================================
# Attendance
# =============================================================================

@hrm_bp.get("/attendances")
@handle_service_errors("list attendances")
def list_attendances_route():
    records = attendance_service.list_attendances(
        month=request.args.get("month"),
        year=request.args.get("year"),
        employee_id=request.args.get("employee_id"),
    )
    return jsonify([r.to_dict() for r in records])


@hrm_bp.post("/attendances")
@handle_service_errors("create attendance")
def create_attendance_route():
    data = json_body()
    record = attendance_service.create_attendance(
        employee_id=data.get("employee_id"),
        date=data.get("date"),
        status=data.get("status"),
        check_in=data.get("check_in"),
        check_out=data.get("check_out"),
        notes=data.get("notes"),
    )
    return jsonify(record.to_dict()), 201


@hrm_bp.post("/attendances/bulk")
@handle_service_errors("create bulk attendances")
def create_bulk_attendances_route():
    data = json_body()
    report = attendance_service.create_bulk_attendances(
        employees=data.get("employees"),
        date=data.get("date"),
        status=data.get("status"),
        check_in=data.get("check_in"),
        check_out=data.get("check_out"),
        notes=data.get("notes"),
    )
    return jsonify(report.to_dict()), 201


# =============================================================================
# Departments
# =============================================================================

@hrm_bp.get("/departments")
@handle_service_errors("list departments")
def list_departments_route():
    return jsonify([d.name for d in department_service.list_departments()])


@hrm_bp.post("/departments")
@handle_service_errors("add department")
def add_department_route():
    department = department_service.add_department(json_body().get("department"))
    return jsonify({"message": "Department added successfully", "department": department.name}), 201


@hrm_bp.delete("/departments/<string:name>")
@handle_service_errors("delete department")
def delete_department_route(name: str):
    department_service.delete_department(name)
    return jsonify({"message": "Department deleted successfully", "department": name})
