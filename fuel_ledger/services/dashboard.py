from datetime import date
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from fuel_ledger.core.errors import ValidationFailed
from fuel_ledger.models.nozzle_model import FUEL_TYPES
from fuel_ledger.services import aggregation
from fuel_ledger.utils.calculations import num
from fuel_ledger.utils.period import resolve_period, parse_month, MONTH


def current_month() -> str:
    return date.today().strftime("%Y-%m")


def _daily_sales_series(db: Session, start: str, end: str) -> tuple[list[dict], dict[str, set]]:
    rows = db.execute(
        text(
            """
            select sr.date            as date,
                   n.fuel_type        as fuel_type,
                   sum(sr.sales_value) as total_value
            from sales_readings sr
                     join nozzles n on n.id = sr.nozzle_id
            where sr.date >= :start
              and sr.date <= :end
            group by sr.date, n.fuel_type
            order by sr.date asc
            """
        ),
        {"start": start, "end": end},
    ).mappings().all()

    daily: dict[str, dict] = {}
    sale_days = {ft: set() for ft in FUEL_TYPES}
    for r in rows:
        day = daily.setdefault(r["date"], {"date": r["date"], **{ft: 0.0 for ft in FUEL_TYPES}, "total": 0.0})
        value = num(r["total_value"])
        day[r["fuel_type"]] = day.get(r["fuel_type"], 0.0) + value
        day["total"] += value
        if r["fuel_type"] in sale_days:
            sale_days[r["fuel_type"]].add(r["date"])

    series = sorted(daily.values(), key=lambda d: d["date"])
    return series, sale_days


def _daily_expense_series(db: Session, start: str, end: str) -> list[dict]:
    rows = db.execute(
        text(
            """
            select date, sum(amount) as amount
            from expenses
            where date >= :start
              and date <= :end
            group by date
            order by date asc
            """
        ),
        {"start": start, "end": end},
    ).mappings().all()
    return [{"date": r["date"], "amount": num(r["amount"])} for r in rows]


def compose_dashboard(db: Session, month: Optional[str] = None) -> dict:
    """
    Month view of sales, expenses and credit activity.

    Daily series only contain days with data; the UI pads calendar days.
    total_due is deliberately all-time: it is the outstanding debt today.
    """
    month = month or current_month()
    if parse_month(month) is None:
        raise ValidationFailed([f"Invalid month {month!r}; expected YYYY-MM"])

    period = resolve_period(MONTH, month=month)
    start, end = period.start_date, period.end_date

    sales = aggregation.sales_period_summary(db, period)
    totals_by_fuel = {ft: sales.fuel(ft).total_value for ft in FUEL_TYPES}
    daily_series, sale_days = _daily_sales_series(db, start, end)

    # days with any sale for the fuel, never below 1 so an idle fuel averages 0
    daily_average_by_fuel = {
        ft: totals_by_fuel[ft] / max(1, len(sale_days[ft])) for ft in FUEL_TYPES
    }

    expenses = aggregation.expenses_period_summary(db, period)
    tx = aggregation.transaction_totals(db, period)

    return {
        "month": month,
        "sales": {
            "total_sales": sales.total_value,
            "totals_by_fuel": totals_by_fuel,
            "daily_series": daily_series,
            "daily_average_by_fuel": daily_average_by_fuel,
        },
        "expenses": {
            "total": expenses.total_amount,
            "daily_series": _daily_expense_series(db, start, end),
        },
        "credits": {
            "month_credit": tx["credit"],
            "month_payment": tx["payment"],
            "month_net": tx["net"],
            "total_due": aggregation.total_due_all_customers(db),
        },
    }
