# Overview: Pytest coverage for atomic sequence counters.

from backoffice.models import Counter
from backoffice.services import sequence_service
from backoffice.services.sequence_service import (
    EMPLOYEE_NUMBER,
    GATE_IN_INVOICE,
    GATE_OUT_INVOICE,
    format_invoice_number,
    next_value,
)


class TestNextValue:
    def test_missing_counter_starts_at_one(self, db_session):
        assert next_value("widgets") == 1
        assert next_value("widgets") == 2
        assert next_value("widgets") == 3

    def test_counter_row_holds_last_value(self, db_session):
        next_value("widgets")
        next_value("widgets")
        db_session.commit()

        counter = db_session.query(Counter).filter_by(name="widgets").one()
        assert counter.value == 2

    def test_counters_are_independent(self, db_session):
        assert next_value(EMPLOYEE_NUMBER) == 1
        assert next_value(GATE_OUT_INVOICE) == 1
        assert next_value(EMPLOYEE_NUMBER) == 2
        assert next_value(GATE_OUT_INVOICE) == 2

    def test_gate_in_numbering_starts_at_1000(self, db_session):
        assert next_value(GATE_IN_INVOICE) == 1000
        assert next_value(GATE_IN_INVOICE) == 1001

    def test_explicit_start(self, db_session):
        assert next_value("orders", start=500) == 500
        assert next_value("orders", start=500) == 501

    def test_increment_rolls_back_with_caller(self, db_session):
        next_value("widgets")
        db_session.commit()
        next_value("widgets")
        db_session.rollback()

        assert next_value("widgets") == 2


def test_format_invoice_number():
    assert format_invoice_number(1) == "INV-000001"
    assert format_invoice_number(123456) == "INV-123456"


def test_list_counters_sorted_by_name(db_session):
    next_value("zeta")
    next_value("alpha")
    db_session.commit()

    names = [c.name for c in sequence_service.list_counters()]
    assert names == ["alpha", "zeta"]
