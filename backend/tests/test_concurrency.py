# Overview: Pytest coverage for the retry and row-locking helpers.

import pytest
from sqlalchemy.orm.exc import StaleDataError

from backoffice.models import Counter
from backoffice.services.concurrency import lock_row, run_with_retry


class TestRunWithRetry:
    def test_retries_stale_data(self, db_session):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise StaleDataError("version mismatch")
            return "done"

        assert run_with_retry(flaky, label="flaky op", backoff_base=0) == "done"
        assert len(calls) == 3

    def test_gives_up_after_attempts(self, db_session):
        def always_stale():
            raise StaleDataError("version mismatch")

        with pytest.raises(StaleDataError):
            run_with_retry(always_stale, label="stale op", attempts=2, backoff_base=0)

    def test_other_errors_propagate_immediately(self, db_session):
        calls = []

        def broken():
            calls.append(1)
            raise ValueError("bad input")

        with pytest.raises(ValueError):
            run_with_retry(broken, label="broken op", backoff_base=0)
        assert len(calls) == 1


def test_lock_row(db_session):
    db_session.add(Counter(name="widgets", value=4))
    db_session.commit()
    counter_id = db_session.query(Counter.id).filter_by(name="widgets").scalar()

    assert lock_row(Counter, counter_id).value == 4
    assert lock_row(Counter, counter_id + 100) is None
