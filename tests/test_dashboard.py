import pytest

from fuel_ledger.core.errors import ValidationFailed
from fuel_ledger.services import ledger_store
from fuel_ledger.services.dashboard import compose_dashboard
from fuel_ledger.services.sales_reconciliation import save_readings_for_date


def test_idle_fuel_averages_zero(priced_nozzles):
    db = priced_nozzles
    save_readings_for_date(db, "2024-01-01", [{"nozzle_id": 1, "opening": 100, "closing": 150}])
    save_readings_for_date(db, "2024-01-02", [{"nozzle_id": 1, "opening": 150, "closing": 160}])

    d = compose_dashboard(db, "2024-01")
    avg = d["sales"]["daily_average_by_fuel"]

    assert avg["diesel"] == 0
    assert avg["others"] == 0
    assert avg["petrol"] == pytest.approx((4775.0 + 955.0) / 2)
    assert d["sales"]["total_sales"] == pytest.approx(5730.0)
    assert d["sales"]["totals_by_fuel"]["petrol"] == pytest.approx(5730.0)
    assert [p["date"] for p in d["sales"]["daily_series"]] == ["2024-01-01", "2024-01-02"]


def test_empty_month(db_session):
    d = compose_dashboard(db_session, "2031-05")
    assert d["sales"]["total_sales"] == 0
    assert d["sales"]["daily_series"] == []
    assert all(v == 0 for v in d["sales"]["daily_average_by_fuel"].values())
    assert d["expenses"]["total"] == 0


def test_credits_month_vs_all_time_due(db_session, customer_a):
    ledger_store.add_transaction(
        db_session, {"customer_id": customer_a.id, "amount": 50, "type": "credit", "date": "2024-02-03"}
    )
    d = compose_dashboard(db_session, "2024-02")
    assert d["credits"] == {
        "month_credit": 50,
        "month_payment": 0,
        "month_net": 50,
        "total_due": 650,
    }


def test_expense_series(db_session):
    ledger_store.insert_expense(db_session, {"date": "2024-03-02", "description": "Tea", "amount": 40})
    ledger_store.insert_expense(db_session, {"date": "2024-03-02", "description": "Diesel genset", "amount": 600})
    d = compose_dashboard(db_session, "2024-03")
    assert d["expenses"]["total"] == 640
    assert d["expenses"]["daily_series"] == [{"date": "2024-03-02", "amount": 640}]


def test_bad_month_is_rejected(db_session):
    with pytest.raises(ValidationFailed):
        compose_dashboard(db_session, "2024-13")
