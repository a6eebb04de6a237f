# Overview: Pytest coverage for the daily -> monthly -> yearly expense roll-up.

from datetime import date

import pytest

from backoffice.services import expense_service
from backoffice.validation import ValidationError


def _transfer(day, *amounts):
    return expense_service.transfer_daily_to_monthly(
        date=day,
        entries=[{"date": day, "amount": a} for a in amounts],
    )


def _yearly_amounts(year):
    return {e["month"]: e["amount"] for e in expense_service.list_yearly(year=year)}


class TestDailyTransfer:
    def test_day_total_cascades_to_yearly(self, db_session):
        result = _transfer("2024-03-05", 60, 40)

        assert result["transferred_months"] == ["2024-03"]
        assert result["monthly"][0]["entries"] == [{"date": "2024-03-05", "amount": 100.0}]
        assert _yearly_amounts(2024) == {"2024-03": 100.0}

    def test_repeat_transfer_overwrites(self, db_session):
        _transfer("2024-03-05", 100)
        _transfer("2024-03-05", 100)

        assert _yearly_amounts(2024) == {"2024-03": 100.0}
        monthly = expense_service.list_monthly()
        assert len(monthly) == 1
        assert len(monthly[0].entries) == 1

    def test_new_day_adds_to_month(self, db_session):
        _transfer("2024-03-05", 100)
        _transfer("2024-03-06", 50)

        assert _yearly_amounts(2024) == {"2024-03": 150.0}

    def test_entries_spanning_months(self, db_session):
        result = expense_service.transfer_daily_to_monthly(
            date="2024-03-31",
            entries=[
                {"date": "2024-03-31", "amount": 10},
                {"date": "2024-04-01", "amount": 20},
            ],
        )
        assert result["transferred_months"] == ["2024-03", "2024-04"]
        assert _yearly_amounts(2024) == {"2024-03": 10.0, "2024-04": 20.0}

    @pytest.mark.parametrize(
        "entries",
        [
            [],
            [{"date": "2024-03-05", "amount": 0}],
            [{"date": "2024-03-05", "amount": "10"}],
            [{"date": "not-a-date", "amount": 10}],
            [{"amount": 10}],
        ],
    )
    def test_rejects_bad_entries(self, db_session, entries):
        with pytest.raises(ValidationError):
            expense_service.transfer_daily_to_monthly(date="2024-03-05", entries=entries)

    def test_nothing_written_on_rejection(self, db_session):
        with pytest.raises(ValidationError):
            expense_service.transfer_daily_to_monthly(
                date="2024-03-05",
                entries=[{"date": "2024-03-05", "amount": 10}, {"date": "2024-03-05", "amount": -1}],
            )
        assert expense_service.list_monthly() == []


class TestMonthlyTransfer:
    def test_explicit_month(self, db_session):
        _transfer("2024-03-05", 100)
        result = expense_service.transfer_monthly_to_yearly(2024, 3)

        assert result["year_month"] == "2024-03"
        assert result["yearly"]["expenses"] == [{"month": "2024-03", "amount": 100.0}]

    def test_defaults_to_previous_month(self, db_session):
        _transfer("2023-12-20", 75)
        result = expense_service.transfer_monthly_to_yearly(today=date(2024, 1, 2))

        assert result["year_month"] == "2023-12"
        assert _yearly_amounts(2023) == {"2023-12": 75.0}

    def test_empty_month(self, db_session):
        result = expense_service.transfer_monthly_to_yearly(2024, 2)
        assert result["yearly"] is None
        assert result["message"] == "No expenses found for 2024-02"

    def test_year_without_month(self, db_session):
        with pytest.raises(ValidationError):
            expense_service.transfer_monthly_to_yearly(2024, None)


class TestExpenseQueries:
    def test_monthly_date_range(self, db_session):
        _transfer("2024-01-10", 5)
        _transfer("2024-02-10", 5)
        _transfer("2024-04-10", 5)

        found = expense_service.list_monthly(date_range="2024-02-01,2024-03-31")
        assert [m.year_month for m in found] == ["2024-02"]

    def test_invalid_date_range(self, db_session):
        with pytest.raises(ValidationError, match="Invalid date range"):
            expense_service.list_monthly(date_range="2024-02-01")

    def test_analytics(self, db_session):
        _transfer("2024-03-05", 100)
        _transfer("2024-03-06", 50)
        _transfer("2025-01-02", 20)

        stats = expense_service.get_expense_analytics()

        assert stats["monthly_stats"] == [
            {"year_month": "2024-03", "total_amount": 150.0, "count": 2},
            {"year_month": "2025-01", "total_amount": 20.0, "count": 1},
        ]
        assert stats["yearly_stats"] == [
            {"year": 2024, "total_amount": 150.0, "count": 1},
            {"year": 2025, "total_amount": 20.0, "count": 1},
        ]


class TestExpenseRoutes:
    def test_transfer_and_read(self, client, db_session):
        resp = client.post("/api/expenses/transfer-daily", json={
            "date": "2024-03-05",
            "entries": [{"date": "2024-03-05", "amount": 100}],
        })
        assert resp.status_code == 200

        resp = client.get("/api/expenses/yearly?year=2024")
        body = resp.get_json()
        assert body["results"] == 1
        assert body["expenses"][0]["month"] == "2024-03"

        resp = client.get("/api/expenses/monthly")
        assert resp.get_json()["results"] == 1

    def test_transfer_missing_entries_is_400(self, client, db_session):
        resp = client.post("/api/expenses/transfer-daily", json={"date": "2024-03-05"})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Date and valid entries are required"
