# Overview: Service-layer operations for named sequences; atomic counter allocation.

"""
Sequence Service

Every human-facing number (employee numbers, gate-in / gate-out invoice
numbers, sales invoice numbers) is allocated here with a single
UPDATE ... SET value = value + 1 against the counter row, never by
reading the current maximum of the numbered table.

The allocation runs inside the caller's transaction: if the caller rolls
back, the increment rolls back with it.
"""

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Counter
from .concurrency import run_with_retry


EMPLOYEE_NUMBER = "employee_number"
GATE_IN_INVOICE = "gate_in_invoice"
GATE_OUT_INVOICE = "gate_out_invoice"
INVOICE = "invoice"

# First value handed out per counter. Gate-in numbering has always started at 1000.
SEQUENCE_STARTS = {
    EMPLOYEE_NUMBER: 1,
    GATE_IN_INVOICE: 1000,
    GATE_OUT_INVOICE: 1,
    INVOICE: 1,
}


class SequenceError(ValueError):
    pass


def _current(name: str) -> int:
    return db.session.query(Counter.value).filter_by(name=name).scalar()


def next_value(name: str, *, start: int | None = None) -> int:
    """
    Atomically increment and return counter `name`.

    A missing counter is created so that the first call returns `start`
    (1 unless configured otherwise). Concurrent creators of the same counter
    collide on the unique name; the loser re-runs the increment.
    """
    if not name:
        raise SequenceError("sequence name is required")
    if start is None:
        start = SEQUENCE_STARTS.get(name, 1)

    def _op() -> int:
        stmt = (
            update(Counter)
            .where(Counter.name == name)
            .values(value=Counter.value + 1)
        )

        result = db.session.execute(stmt)
        if result.rowcount:
            return _current(name)

        counter = Counter(name=name, value=start)
        try:
            with db.session.begin_nested():
                db.session.add(counter)
        except IntegrityError:
            result = db.session.execute(stmt)
            if not result.rowcount:
                raise
            return _current(name)
        return start

    return run_with_retry(_op, label=f"Counter {name} increment")


def format_invoice_number(value: int) -> str:
    return f"INV-{value:06d}"


def list_counters() -> list[Counter]:
    return db.session.query(Counter).order_by(Counter.name.asc()).all()
