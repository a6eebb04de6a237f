# Overview: Pytest coverage for HR operations: employees, salaries, advances, attendance and departments.

from datetime import timedelta
from decimal import Decimal

import pytest

from backoffice.models import AttendanceRecord, SalaryRecord
from backoffice.services import (
    advance_service,
    attendance_service,
    department_service,
    employee_service,
    salary_service,
)
from backoffice.time_utils import utcnow
from backoffice.validation import ConflictError, NotFoundError, ValidationError


class TestEmployees:
    """Employee directory rules."""

    def test_numbers_are_sequential(self, make_employee):
        first = make_employee()
        second = make_employee()
        assert (first.employee_number, second.employee_number) == (1, 2)
        assert first.status == "active"

    def test_missing_fields_reported_together(self, db_session):
        with pytest.raises(ValidationError) as exc:
            employee_service.create_employee({"name": "Ayesha"})
        assert set(exc.value.errors) == {"position", "department", "basic_salary", "contact"}

    def test_field_errors_reported_together(self, make_employee):
        with pytest.raises(ValidationError) as exc:
            make_employee(contact="12ab", email="bad", basic_salary=-1)
        assert set(exc.value.errors) == {"contact", "email", "basic_salary"}

    def test_duplicate_contact(self, make_employee):
        make_employee(contact="03215550000")
        with pytest.raises(ValidationError) as exc:
            make_employee(contact="03215550000")
        assert exc.value.errors["contact"] == "Contact number already exists"

    def test_duplicate_email_case_insensitive(self, make_employee):
        make_employee(email="ayesha@corp.test")
        with pytest.raises(ValidationError) as exc:
            make_employee(email="AYESHA@corp.test")
        assert "email" in exc.value.errors

    def test_future_join_date_rejected(self, make_employee):
        with pytest.raises(ValidationError) as exc:
            make_employee(join_date=(utcnow() + timedelta(days=3)).isoformat())
        assert "join_date" in exc.value.errors

    def test_failed_create_does_not_consume_number(self, make_employee):
        with pytest.raises(ValidationError):
            make_employee(contact="x")
        assert make_employee().employee_number == 1

    def test_update_checks_contact_against_others(self, make_employee):
        make_employee(contact="03215550000")
        other = make_employee()
        with pytest.raises(ValidationError):
            employee_service.update_employee(other.id, {"contact": "03215550000"})

    def test_update_keeps_own_contact(self, make_employee):
        employee = make_employee(contact="03215550000")
        updated = employee_service.update_employee(employee.id, {"contact": "03215550000", "position": "Lead"})
        assert updated.position == "Lead"

    def test_deactivate_is_soft(self, make_employee):
        employee = make_employee()
        employee_service.deactivate_employee(employee.id)

        assert employee_service.get_employee(employee.id).status == "inactive"
        assert employee_service.list_employees(status="active") == []

    def test_search_and_sort(self, make_employee):
        make_employee(name="Bilal", basic_salary=900)
        make_employee(name="Ayesha", basic_salary=1500)

        names = [e.name for e in employee_service.list_employees(sort_by="basic_salary", sort_direction="asc")]
        assert names == ["Bilal", "Ayesha"]
        assert [e.name for e in employee_service.list_employees(search="aye")] == ["Ayesha"]

    def test_bad_sort_column(self, db_session):
        with pytest.raises(ValidationError):
            employee_service.list_employees(sort_by="password")

    def test_check_contact(self, make_employee):
        employee = make_employee(contact="03215550000")
        assert employee_service.check_contact("03215550000") == {"exists": True, "employee_id": employee.id}
        assert employee_service.check_contact("03210000000") == {"exists": False, "employee_id": None}


class TestSalaries:
    def test_net_salary_computed(self, make_employee):
        employee = make_employee(basic_salary=1000)
        record = salary_service.create_salary(
            employee_id=employee.id, month=3, year=2024,
            allowances=200, deductions=50, bonuses=100,
        )
        assert Decimal(record.net_salary) == Decimal("1250.00")
        assert Decimal(record.basic_salary) == Decimal("1000.00")
        assert record.status == "pending"

    def test_basic_salary_is_snapshotted(self, make_employee):
        employee = make_employee(basic_salary=1000)
        record = salary_service.create_salary(employee_id=employee.id, month=3, year=2024)
        employee_service.update_employee(employee.id, {"basic_salary": 2000})

        assert Decimal(record.basic_salary) == Decimal("1000.00")

    def test_claimed_net_must_match(self, make_employee):
        employee = make_employee(basic_salary=1000)
        salary_service.create_salary(employee_id=employee.id, month=4, year=2024, net_salary="1000.01")
        with pytest.raises(ValidationError):
            salary_service.create_salary(employee_id=employee.id, month=5, year=2024, net_salary=990)

    def test_negative_net_rejected(self, make_employee):
        employee = make_employee(basic_salary=100)
        with pytest.raises(ValidationError, match="net_salary cannot be negative"):
            salary_service.create_salary(employee_id=employee.id, month=3, year=2024, deductions=500)

    def test_duplicate_period_conflicts(self, make_employee):
        employee = make_employee()
        salary_service.create_salary(employee_id=employee.id, month=3, year=2024)
        with pytest.raises(ConflictError, match="Salary record already exists for this month"):
            salary_service.create_salary(employee_id=employee.id, month=3, year=2024)

    @pytest.mark.parametrize("month, year", [(0, 2024), (13, 2024), (3, 1999), (None, 2024)])
    def test_period_validated(self, make_employee, month, year):
        employee = make_employee()
        with pytest.raises(ValidationError):
            salary_service.create_salary(employee_id=employee.id, month=month, year=year)

    def test_unknown_employee(self, db_session):
        with pytest.raises(NotFoundError):
            salary_service.create_salary(employee_id=404, month=3, year=2024)

    def test_bulk_skips_existing_and_unknown(self, make_employee, db_session):
        a = make_employee()
        b = make_employee()
        salary_service.create_salary(employee_id=a.id, month=3, year=2024)

        report = salary_service.create_bulk_salaries(employees=[a.id, b.id, 999], month=3, year=2024)
        body = report.to_dict()

        assert body["created_count"] == 1
        assert body["skipped_count"] == 2
        assert {s["employee_id"] for s in body["skipped"]} == {a.id, 999}
        assert db_session.query(SalaryRecord).count() == 2

    def test_bulk_failure_rolls_back_whole_batch(self, make_employee, db_session, monkeypatch):
        employees = [make_employee() for _ in range(3)]
        original = salary_service._build_record
        calls = []

        def _fail_on_third(*args, **kwargs):
            calls.append(args[0].id)
            if len(calls) == 3:
                raise RuntimeError("disk full")
            return original(*args, **kwargs)

        monkeypatch.setattr(salary_service, "_build_record", _fail_on_third)

        with pytest.raises(RuntimeError, match="disk full"):
            salary_service.create_bulk_salaries(employees=[e.id for e in employees], month=3, year=2024)

        assert len(calls) == 3
        assert db_session.query(SalaryRecord).count() == 0

    def test_status_paid_stamps_payment_date(self, make_employee):
        employee = make_employee()
        record = salary_service.create_salary(employee_id=employee.id, month=3, year=2024)

        paid = salary_service.update_salary_status(record.id, "paid")
        assert paid.payment_date is not None

        reverted = salary_service.update_salary_status(record.id, "pending")
        assert reverted.payment_date is None

    def test_list_by_period(self, make_employee):
        employee = make_employee()
        salary_service.create_salary(employee_id=employee.id, month=3, year=2024)
        salary_service.create_salary(employee_id=employee.id, month=4, year=2024)

        assert [s.month for s in salary_service.list_salaries(month=4, year=2024)] == [4]


class TestAdvances:
    @pytest.fixture
    def advance(self, make_employee):
        employee = make_employee()
        return advance_service.create_advance(employee_id=employee.id, amount=500, reason="Medical")

    def test_repayments_accumulate(self, advance):
        advance_service.add_repayment(advance.id, amount=200)
        updated = advance_service.add_repayment(advance.id, amount=300)

        assert Decimal(updated.total_repaid) == Decimal("500.00")
        assert Decimal(updated.remaining) == Decimal("0.00")

    def test_overrepayment_rejected(self, advance):
        advance_service.add_repayment(advance.id, amount=400)
        with pytest.raises(ValidationError, match="Repayment amount exceeds remaining balance"):
            advance_service.add_repayment(advance.id, amount=101)

        assert len(advance_service.list_advances()[0].repayments) == 1

    def test_repayment_bumps_version(self, advance):
        before = advance.version_id
        updated = advance_service.add_repayment(advance.id, amount=10)
        assert updated.version_id > before

    def test_amount_must_be_positive(self, make_employee):
        employee = make_employee()
        with pytest.raises(ValidationError):
            advance_service.create_advance(employee_id=employee.id, amount=0, reason="Rent")

    def test_status_transition(self, advance):
        assert advance_service.update_advance_status(advance.id, "approved").status == "approved"
        with pytest.raises(ValidationError):
            advance_service.update_advance_status(advance.id, "settled")

    def test_unknown_advance(self, db_session):
        with pytest.raises(NotFoundError):
            advance_service.add_repayment(77, amount=1)


class TestAttendance:
    def test_one_record_per_day(self, make_employee):
        employee = make_employee()
        attendance_service.create_attendance(
            employee_id=employee.id, date="2024-03-05T09:00:00", status="present",
            check_in="09:00", check_out="17:30",
        )
        with pytest.raises(ConflictError, match="Attendance already recorded for this date"):
            attendance_service.create_attendance(
                employee_id=employee.id, date="2024-03-05T14:00:00", status="late",
            )

    def test_check_times_combined_with_day(self, make_employee):
        employee = make_employee()
        record = attendance_service.create_attendance(
            employee_id=employee.id, date="2024-03-05", status="present", check_in="08:45",
        )
        assert record.check_in.isoformat() == "2024-03-05T08:45:00"

    def test_check_out_before_check_in(self, make_employee):
        employee = make_employee()
        with pytest.raises(ValidationError):
            attendance_service.create_attendance(
                employee_id=employee.id, date="2024-03-05", status="present",
                check_in="17:00", check_out="09:00",
            )

    def test_unknown_status(self, make_employee):
        employee = make_employee()
        with pytest.raises(ValidationError):
            attendance_service.create_attendance(employee_id=employee.id, date="2024-03-05", status="holiday")

    def test_bulk_skips_duplicates_within_batch(self, make_employee, db_session):
        a = make_employee()
        b = make_employee()

        report = attendance_service.create_bulk_attendances(
            employees=[a.id, b.id, a.id, "abc"], date="2024-03-05", status="present",
        )

        assert len(report.created) == 2
        assert [s.reason for s in report.skipped] == [
            "Attendance already recorded for this date",
            "Invalid employee id",
        ]
        assert db_session.query(AttendanceRecord).count() == 2

    def test_bulk_failure_rolls_back_whole_batch(self, make_employee, db_session, monkeypatch):
        employees = [make_employee() for _ in range(3)]
        original = attendance_service._Mark.record_for
        calls = []

        def _fail_on_third(mark, employee_id):
            calls.append(employee_id)
            if len(calls) == 3:
                raise RuntimeError("disk full")
            return original(mark, employee_id)

        monkeypatch.setattr(attendance_service._Mark, "record_for", _fail_on_third)

        with pytest.raises(RuntimeError, match="disk full"):
            attendance_service.create_bulk_attendances(
                employees=[e.id for e in employees], date="2024-03-05", status="present",
            )

        assert len(calls) == 3
        assert db_session.query(AttendanceRecord).count() == 0

    def test_list_by_month(self, make_employee):
        employee = make_employee()
        attendance_service.create_attendance(employee_id=employee.id, date="2024-03-31", status="present")
        attendance_service.create_attendance(employee_id=employee.id, date="2024-04-01", status="absent")

        march = attendance_service.list_attendances(month=3, year=2024)
        assert [r.status for r in march] == ["present"]


class TestDepartments:
    def test_seed_is_idempotent(self, app, db_session):
        added = department_service.seed_default_departments()
        assert added == len(app.config["DEFAULT_DEPARTMENTS"])
        assert department_service.seed_default_departments() == 0

    def test_duplicate_name(self, db_session):
        department_service.add_department("Logistics")
        with pytest.raises(ConflictError):
            department_service.add_department("Logistics")

    def test_delete_refused_while_in_use(self, make_employee):
        department_service.add_department("Operations")
        make_employee(department="Operations")

        with pytest.raises(ConflictError, match="Cannot delete department with 1 employee"):
            department_service.delete_department("Operations")

    def test_delete_unknown(self, db_session):
        with pytest.raises(NotFoundError):
            department_service.delete_department("Nowhere")


class TestHrmRoutes:
    def test_employee_validation_body(self, client, db_session):
        resp = client.post("/api/hrm/employees", json={"name": "Ayesha"})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["message"] == "Validation failed"
        assert "contact" in body["errors"]

    def test_salary_bulk_report(self, client, make_employee):
        employee = make_employee()
        resp = client.post("/api/hrm/salaries/bulk", json={
            "employees": [employee.id], "month": 3, "year": 2024,
        })
        assert resp.status_code == 201
        assert resp.get_json()["created_count"] == 1

    def test_repay_route(self, client, make_employee):
        employee = make_employee()
        advance = advance_service.create_advance(employee_id=employee.id, amount=100, reason="Travel")

        resp = client.post("/api/hrm/advances/repay", json={"advance_id": advance.id, "amount": 150})
        assert resp.status_code == 400

        resp = client.post("/api/hrm/advances/repay", json={"advance_id": advance.id, "amount": 100})
        assert resp.status_code == 200
        assert resp.get_json()["remaining"] == 0.0

    def test_attendance_duplicate_is_409(self, client, make_employee):
        employee = make_employee()
        payload = {"employee_id": employee.id, "date": "2024-03-05", "status": "present"}
        assert client.post("/api/hrm/attendances", json=payload).status_code == 201
        assert client.post("/api/hrm/attendances", json=payload).status_code == 409

    def test_departments_roundtrip(self, client, db_session):
        resp = client.post("/api/hrm/departments", json={"department": "Logistics"})
        assert resp.status_code == 201
        assert client.get("/api/hrm/departments").get_json() == ["Logistics"]
        assert client.delete("/api/hrm/departments/Logistics").status_code == 200
        assert client.get("/api/hrm/departments").get_json() == []
