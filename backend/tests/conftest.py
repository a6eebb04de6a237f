"""
Pytest fixtures for back-office backend tests.

Provides an in-memory application, a per-test table wipe, a test client,
and small factories for the records most tests start from.
"""

import pytest

from backoffice import create_app
from backoffice.extensions import db
from backoffice.services import customer_service, employee_service, vendor_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def make_vendor(db_session):
    """Factory: vendor with unique contact details per call."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "name": f"Vendor {n}",
            "email": f"vendor{n}@supplies.test",
            "phone": f"030000000{n:02d}",
            "address": f"{n} Industrial Estate",
        }
        fields.update(overrides)
        return vendor_service.create_vendor(**fields)

    return _make


@pytest.fixture(scope='function')
def make_customer(db_session):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "name": f"Customer {n}",
            "email": f"customer{n}@example.test",
            "phone": f"0311000{n:04d}",
            "address": f"{n} Market Street",
        }
        fields.update(overrides)
        return customer_service.create_customer(**fields)

    return _make


@pytest.fixture(scope='function')
def make_employee(db_session):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        payload = {
            "name": f"Employee {n}",
            "position": "Operator",
            "department": "Operations",
            "basic_salary": 1000,
            "contact": f"0321000{n:04d}",
        }
        payload.update(overrides)
        return employee_service.create_employee(payload)

    return _make
