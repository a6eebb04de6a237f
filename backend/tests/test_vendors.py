# Overview: Pytest coverage for vendor service rules, ledger totals and API error bodies.

from datetime import datetime

import pytest

from backoffice.services import gate_in_service, vendor_service
from backoffice.validation import ConflictError, NotFoundError, ValidationError


class TestVendorValidation:
    """Field rules applied before anything is written."""

    def test_create_normalizes_email(self, make_vendor):
        vendor = make_vendor(email="Sales@Acme.TEST")
        assert vendor.email == "sales@acme.test"
        assert vendor.status == "Active"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": "A"},
            {"email": "not-an-email"},
            {"phone": "03001x34567"},
            {"phone": "123456"},
            {"address": "abc"},
            {"status": "Dormant"},
        ],
    )
    def test_rejects_malformed_fields(self, make_vendor, overrides):
        with pytest.raises(ValidationError):
            make_vendor(**overrides)

    def test_duplicate_email_conflicts(self, make_vendor):
        make_vendor(email="dup@acme.test")
        with pytest.raises(ConflictError, match="Email already registered"):
            make_vendor(email="dup@acme.test")

    def test_duplicate_phone_conflicts(self, make_vendor):
        make_vendor(phone="03001234567")
        with pytest.raises(ConflictError, match="Phone number already registered"):
            make_vendor(phone="03001234567")

    def test_update_may_keep_own_email(self, make_vendor):
        vendor = make_vendor(email="keep@acme.test")
        updated = vendor_service.update_vendor(vendor.id, {"email": "keep@acme.test", "name": "Renamed"})
        assert updated.name == "Renamed"

    def test_update_cannot_take_another_vendors_phone(self, make_vendor):
        make_vendor(phone="03009999999")
        other = make_vendor()
        with pytest.raises(ConflictError):
            vendor_service.update_vendor(other.id, {"phone": "03009999999"})

    def test_update_rejects_unknown_field(self, make_vendor):
        vendor = make_vendor()
        with pytest.raises(ValidationError, match="Field not allowed"):
            vendor_service.update_vendor(vendor.id, {"balance": 10})


class TestVendorQueries:
    def test_search_matches_company(self, make_vendor):
        make_vendor(company="Northern Steel")
        make_vendor(company="Southern Wood")

        found = vendor_service.list_vendors(search="steel")
        assert [v.company for v in found] == ["Northern Steel"]

    def test_status_filter(self, make_vendor):
        make_vendor(status="Inactive")
        make_vendor()

        assert len(vendor_service.list_vendors(status="Inactive")) == 1
        assert len(vendor_service.list_vendors()) == 2

    def test_missing_vendor(self, db_session):
        with pytest.raises(NotFoundError):
            vendor_service.get_vendor(999)

    def test_delete_leaves_gate_in_records(self, make_vendor):
        vendor = make_vendor()
        record = gate_in_service.create_gate_in(
            vendor_id=vendor.id,
            items=[{"name": "Copper", "units": "kg", "quantity": 1, "unit_price": 10}],
        )
        vendor_service.delete_vendor(vendor.id)

        kept = gate_in_service.get_gate_in(record.id)
        assert kept.vendor_id == vendor.id


class TestVendorLedger:
    def test_running_balance_oldest_first(self, make_vendor):
        vendor = make_vendor()
        first = gate_in_service.create_gate_in(
            vendor_id=vendor.id,
            items=[{"name": "Iron", "units": "kg", "quantity": 2, "unit_price": 100}],
            date=datetime(2024, 1, 10),
        )
        gate_in_service.create_gate_in(
            vendor_id=vendor.id,
            items=[{"name": "Zinc", "units": "kg", "quantity": 1, "unit_price": 50}],
            date=datetime(2024, 2, 10),
        )
        gate_in_service.add_payment(first.id, amount=150, method="Cash")

        ledger = vendor_service.vendor_ledger(vendor.id)

        assert ledger["total_billed"] == 250.0
        assert ledger["total_paid"] == 150.0
        assert ledger["balance"] == 100.0
        assert [e["balance"] for e in ledger["entries"]] == [50.0, 50.0]
        assert [e["running_balance"] for e in ledger["entries"]] == [50.0, 100.0]


class TestVendorRoutes:
    def test_create_and_fetch(self, client, db_session):
        resp = client.post("/api/vendors", json={
            "name": "Acme Metals",
            "email": "sales@acme.test",
            "phone": "03001234567",
            "address": "12 Mill Road",
        })
        assert resp.status_code == 201
        vendor_id = resp.get_json()["id"]

        resp = client.get(f"/api/vendors/{vendor_id}")
        assert resp.status_code == 200
        assert resp.get_json()["name"] == "Acme Metals"

    def test_duplicate_is_409(self, client, make_vendor):
        make_vendor(email="sales@acme.test")
        resp = client.post("/api/vendors", json={
            "name": "Acme Again",
            "email": "sales@acme.test",
            "phone": "03007654321",
            "address": "14 Mill Road",
        })
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Email already registered"

    def test_invalid_email_is_400_with_field_errors(self, client, db_session):
        resp = client.post("/api/vendors", json={
            "name": "Acme Metals",
            "email": "nope",
            "phone": "03001234567",
            "address": "12 Mill Road",
        })
        assert resp.status_code == 400
        body = resp.get_json()
        assert "email" in body["errors"]

    def test_unknown_vendor_is_404(self, client, db_session):
        resp = client.get("/api/vendors/4242")
        assert resp.status_code == 404
        assert resp.get_json() == {"message": "Vendor not found"}

    def test_ledger_route(self, client, make_vendor):
        vendor = make_vendor()
        resp = client.get(f"/api/vendors/{vendor.id}/ledger")
        assert resp.status_code == 200
        assert resp.get_json()["entries"] == []
