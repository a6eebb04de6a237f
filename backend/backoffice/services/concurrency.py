# Overview: Service-layer helpers for concurrency; row locking and retry around read-modify-write work.

"""
Concurrency helpers

Payment appends, advance repayments and counter increments read a row and
write it back. They load the row with lock_row() and run the whole
read-modify-write inside run_with_retry(), which rolls back and re-runs it
after a lock timeout or a version_id mismatch.

SQLite ignores SELECT ... FOR UPDATE; the version_id columns on gate-in
records, invoices and advances still turn a lost update into StaleDataError.
"""

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_row(model, row_id: int):
    """Load one row by primary key with FOR UPDATE, or None."""
    return (
        db.session.query(model)
        .filter(model.id == row_id)
        .with_for_update()
        .first()
    )


def run_with_retry(func, *, label: str, attempts: int = 3, backoff_base: float = 0.1):
    """
    Call func(); on a retryable database error roll back and call it again.

    Backoff doubles per attempt. The last failure is re-raised.
    """
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except RETRYABLE_ERRORS as exc:
            db.session.rollback()
            if attempt == attempts:
                current_app.logger.error("%s failed after %s attempts", label, attempts)
                raise
            delay = backoff_base * (2 ** (attempt - 1))
            current_app.logger.warning(
                "%s hit %s, retrying in %.2fs (%s/%s)",
                label, type(exc).__name__, delay, attempt, attempts,
            )
            time.sleep(delay)
