# Overview: Pytest coverage for sales invoices: derived totals, payments, status drift and listing.

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from backoffice.models import Invoice
from backoffice.models.invoices import derive_invoice_status
from backoffice.services import customer_service, invoice_service
from backoffice.time_utils import utcnow
from backoffice.validation import NotFoundError, ValidationError


LINES = [{"name": "Widget", "quantity": 2, "price": 50}]


def _future(days=30):
    return utcnow() + timedelta(days=days)


@pytest.fixture
def customer(make_customer):
    return make_customer(name="Zara Traders")


def _invoice(customer, **overrides):
    fields = {
        "customer_id": customer.id,
        "line_items": LINES,
        "payment_method": "Cash",
        "due_date": _future(),
        "tax": 5,
        "discount": 0,
        "paid": 50,
    }
    fields.update(overrides)
    return invoice_service.create_invoice(**fields)


class TestDeriveInvoiceStatus:
    def test_paid_when_nothing_due(self):
        assert derive_invoice_status(Decimal("0"), datetime(2000, 1, 1), utcnow()) == "Paid"

    def test_overdue_after_due_date(self):
        assert derive_invoice_status(Decimal("1"), datetime(2000, 1, 1), utcnow()) == "Overdue"

    def test_pending_before_due_date(self):
        assert derive_invoice_status(Decimal("1"), _future(), utcnow()) == "Pending"


class TestCreateInvoice:
    def test_derived_amounts(self, customer):
        invoice = _invoice(customer)

        assert Decimal(invoice.subtotal) == Decimal("100.00")
        assert Decimal(invoice.total) == Decimal("105.00")
        assert Decimal(invoice.due) == Decimal("55.00")
        assert invoice.status == "Pending"
        assert invoice.invoice_number == "INV-000001"

    def test_numbers_increase(self, customer):
        _invoice(customer)
        second = _invoice(customer)
        assert second.invoice_number == "INV-000002"

    def test_paid_above_total_rejected(self, customer):
        with pytest.raises(ValidationError, match="Paid amount cannot exceed total amount"):
            _invoice(customer, paid=200)

    def test_discount_above_total_rejected(self, customer):
        with pytest.raises(ValidationError):
            _invoice(customer, discount=500, paid=0)

    def test_requires_line_items(self, customer):
        with pytest.raises(ValidationError, match="At least one line item is required"):
            _invoice(customer, line_items=[])

    def test_quantity_must_be_whole(self, customer):
        with pytest.raises(ValidationError):
            _invoice(customer, line_items=[{"name": "Widget", "quantity": 1.5, "price": 10}])

    def test_unknown_customer(self, db_session):
        with pytest.raises(NotFoundError):
            invoice_service.create_invoice(customer_id=99, line_items=LINES, payment_method="Cash")

    def test_due_date_defaults_to_date(self, customer):
        invoice = _invoice(customer, date=datetime(2024, 3, 5), due_date=None, paid=0)
        assert invoice.due_date == datetime(2024, 3, 5)
        assert invoice.status == "Overdue"

    def test_fully_paid_on_create(self, customer):
        invoice = _invoice(customer, paid=105)
        assert invoice.status == "Paid"


class TestCustomerSnapshot:
    def test_customer_edits_do_not_reach_invoice(self, customer):
        invoice = _invoice(customer)
        customer_service.update_customer(customer.id, {"name": "Renamed Traders"})

        reloaded = invoice_service.get_invoice(invoice.id)
        assert reloaded.customer_name == "Zara Traders"

    def test_changing_customer_resnapshots(self, customer, make_customer):
        invoice = _invoice(customer)
        other = make_customer(name="Bilal Stores")

        updated = invoice_service.update_invoice(invoice.id, {"customer_id": other.id})
        assert updated.customer_id == other.id
        assert updated.customer_name == "Bilal Stores"

    def test_invoice_copies_customer_snapshot(self, customer):
        invoice = _invoice(customer)

        copied = {
            "id": invoice.customer_id,
            "name": invoice.customer_name,
            "email": invoice.customer_email,
            "phone": invoice.customer_phone,
            "address": invoice.customer_address,
        }
        assert copied == customer.snapshot()


class TestUpdateInvoice:
    def test_recomputes_totals(self, customer):
        invoice = _invoice(customer)
        updated = invoice_service.update_invoice(invoice.id, {
            "line_items": [{"name": "Widget", "quantity": 3, "price": 50}],
            "discount": 10,
        })

        assert Decimal(updated.subtotal) == Decimal("150.00")
        assert Decimal(updated.total) == Decimal("145.00")
        assert Decimal(updated.due) == Decimal("95.00")

    def test_paid_above_total_rejected(self, customer):
        invoice = _invoice(customer)
        with pytest.raises(ValidationError):
            invoice_service.update_invoice(invoice.id, {"paid": 1000})

    def test_unknown_field_rejected(self, customer):
        invoice = _invoice(customer)
        with pytest.raises(ValidationError):
            invoice_service.update_invoice(invoice.id, {"total": 1})


class TestInvoicePayments:
    def test_payment_reduces_due(self, customer):
        invoice = _invoice(customer)
        updated = invoice_service.add_payment(invoice.id, amount=25)

        assert Decimal(updated.paid) == Decimal("75.00")
        assert Decimal(updated.due) == Decimal("30.00")
        assert updated.status == "Pending"
        assert updated.payment_history[0].method == "Cash"

    def test_paying_the_rest_marks_paid(self, customer):
        invoice = _invoice(customer)
        updated = invoice_service.add_payment(invoice.id, amount=55, method="CreditCard")

        assert updated.status == "Paid"
        assert Decimal(updated.due) == Decimal("0.00")
        assert updated.payment_history[0].method == "CreditCard"

    def test_payment_above_due_rejected(self, customer):
        invoice = _invoice(customer)
        with pytest.raises(ValidationError, match="Payment amount exceeds due amount"):
            invoice_service.add_payment(invoice.id, amount=60)

    def test_non_positive_rejected(self, customer):
        invoice = _invoice(customer)
        with pytest.raises(ValidationError):
            invoice_service.add_payment(invoice.id, amount=0)


class TestStatusRefresh:
    def test_read_time_status_follows_clock(self, customer):
        invoice = _invoice(customer, due_date=_future(days=1))
        assert invoice.current_status(now=_future(days=2)) == "Overdue"
        assert invoice.status == "Pending"

    def test_refresh_persists_drifted_status(self, customer):
        invoice = _invoice(customer, due_date=_future(days=1))
        _invoice(customer, paid=105)

        changed = invoice_service.refresh_invoice_statuses(now=_future(days=2))

        assert changed == 1
        assert invoice_service.get_invoice(invoice.id).status == "Overdue"

    def test_refresh_is_idempotent(self, customer):
        _invoice(customer, due_date=_future(days=1))
        later = _future(days=2)

        invoice_service.refresh_invoice_statuses(now=later)
        assert invoice_service.refresh_invoice_statuses(now=later) == 0

    def test_refreshed_invoice_still_updatable(self, customer):
        invoice = _invoice(customer, due_date=_future(days=1))
        invoice_service.refresh_invoice_statuses(now=_future(days=2))

        updated = invoice_service.add_payment(invoice.id, amount=55)
        assert updated.status == "Paid"


class TestListInvoices:
    def test_pagination(self, customer):
        for _ in range(3):
            _invoice(customer)

        first = invoice_service.list_invoices(page=1, limit=2)
        second = invoice_service.list_invoices(page=2, limit=2)

        assert first["total_pages"] == 2
        assert len(first["invoices"]) == 2
        assert len(second["invoices"]) == 1
        assert second["current_page"] == 2

    def test_search_by_number_and_customer(self, customer, make_customer):
        _invoice(customer)
        other = make_customer(name="Bilal Stores")
        _invoice(other)

        by_name = invoice_service.list_invoices(search="bilal")["invoices"]
        assert [i.customer_name for i in by_name] == ["Bilal Stores"]

        by_number = invoice_service.list_invoices(search="000001")["invoices"]
        assert [i.invoice_number for i in by_number] == ["INV-000001"]

    def test_by_customer(self, customer, make_customer):
        _invoice(customer)
        other = make_customer()
        _invoice(other)

        assert len(invoice_service.list_by_customer(customer.id)) == 1


class TestInvoiceRoutes:
    def test_create_and_pay(self, client, customer):
        resp = client.post("/api/invoices", json={
            "customer_id": customer.id,
            "line_items": LINES,
            "payment_method": "BankTransfer",
            "due_date": "2999-01-01T00:00:00Z",
            "tax": 5,
            "paid": 50,
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["total"] == 105.0
        assert body["due"] == 55.0
        assert body["customer_snapshot"]["name"] == "Zara Traders"

        resp = client.post(f"/api/invoices/{body['id']}/payments", json={"amount": 100})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Payment amount exceeds due amount"

        resp = client.post(f"/api/invoices/{body['id']}/payments", json={"amount": 55})
        assert resp.get_json()["status"] == "Paid"

    def test_list_shape(self, client, customer):
        _invoice(customer)
        resp = client.get("/api/invoices?page=1&limit=5")
        body = resp.get_json()
        assert set(body) == {"invoices", "total_pages", "current_page"}
        assert body["total_pages"] == 1

    def test_delete(self, client, customer):
        invoice = _invoice(customer)
        resp = client.delete(f"/api/invoices/{invoice.id}")
        assert resp.get_json() == {"message": "Invoice removed"}
        assert client.get(f"/api/invoices/{invoice.id}").status_code == 404

    def test_persisted_rows_match_api(self, client, customer, db_session):
        _invoice(customer)
        assert db_session.query(Invoice).count() == 1
