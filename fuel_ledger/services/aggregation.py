"""
Balance & aggregation engine.

Every figure shown on the dashboard, in CSV exports and in PDF exports comes
out of this module, so the three surfaces cannot disagree.

Balance of a customer at a date = sum(credits) - sum(payments) over
transactions dated on or before it. For a period [start, end]:

  opening = balance strictly before start (0 when start is open)
  closing = opening + credits in period - payments in period

Date bounds are inclusive and compared as YYYY-MM-DD strings.
"""
import logging
from dataclasses import dataclass, field, asdict
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from fuel_ledger.models.nozzle_model import FUEL_TYPES
from fuel_ledger.services import ledger_store
from fuel_ledger.utils.calculations import num
from fuel_ledger.utils.period import ResolvedPeriod, ALL_TIME

logger = logging.getLogger(__name__)


@dataclass
class CustomerTotals:
    total_credit: float = 0.0
    total_payment: float = 0.0
    total_due: float = 0.0


@dataclass
class CustomerPeriodSummary:
    customer_id: int
    opening_balance: float = 0.0
    period_credit: float = 0.0
    period_payment: float = 0.0
    closing_balance: float = 0.0
    totals: CustomerTotals = field(default_factory=CustomerTotals)

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class CustomerSummaryRow:
    id: int
    name: str
    phone: Optional[str]
    email: Optional[str]
    opening: float
    period_credit: float
    period_payment: float
    closing: float


@dataclass
class FuelTotal:
    fuel_type: str
    total_litres: float = 0.0
    total_value: float = 0.0


@dataclass
class SalesSummary:
    by_fuel: list[FuelTotal]
    total_litres: float
    total_value: float
    reading_count: int

    def fuel(self, fuel_type: str) -> FuelTotal:
        for ft in self.by_fuel:
            if ft.fuel_type == fuel_type:
                return ft
        return FuelTotal(fuel_type)


@dataclass
class ExpenseCategoryTotal:
    description: str
    total_amount: float
    count: int


@dataclass
class ExpensesSummary:
    by_category: list[ExpenseCategoryTotal]
    total_amount: float
    count: int


def _bounds(period: Optional[ResolvedPeriod]) -> tuple[Optional[str], Optional[str]]:
    period = period or ALL_TIME
    return period.start_date, period.end_date


# -------------------------------------------------
# (a) single customer
# -------------------------------------------------
def customer_totals(db: Session, customer_id: int) -> CustomerTotals:
    """All-time credit / payment / due. Never period scoped."""
    row = db.execute(
        text(
            """
            select coalesce(sum(case when type = 'credit' then amount else 0 end), 0)       as total_credit,
                   coalesce(sum(case when type = 'payment' then amount else 0 end), 0)      as total_payment,
                   coalesce(sum(case when type = 'credit' then amount else -amount end), 0) as total_due
            from transactions
            where customer_id = :cid
            """
        ),
        {"cid": customer_id},
    ).mappings().first()

    if not row:
        return CustomerTotals()
    return CustomerTotals(
        total_credit=num(row["total_credit"]),
        total_payment=num(row["total_payment"]),
        total_due=num(row["total_due"]),
    )


def opening_balance(db: Session, customer_id: int, start_date: Optional[str]) -> float:
    if not start_date:
        return 0.0
    value = db.execute(
        text(
            """
            select coalesce(sum(case when type = 'credit' then amount else -amount end), 0) as opening
            from transactions
            where customer_id = :cid
              and date < :start
            """
        ),
        {"cid": customer_id, "start": start_date},
    ).scalar()
    return num(value)


def customer_period_summary(
        db: Session, customer_id: int, period: Optional[ResolvedPeriod] = None
) -> CustomerPeriodSummary:
    start, end = _bounds(period)

    row = db.execute(
        text(
            """
            select coalesce(sum(case when type = 'credit' then amount else 0 end), 0)  as period_credit,
                   coalesce(sum(case when type = 'payment' then amount else 0 end), 0) as period_payment
            from transactions
            where customer_id = :cid
              and (:start is null or date >= :start)
              and (:end is null or date <= :end)
            """
        ),
        {"cid": customer_id, "start": start, "end": end},
    ).mappings().first()

    opening = opening_balance(db, customer_id, start)
    credit = num(row["period_credit"]) if row else 0.0
    payment = num(row["period_payment"]) if row else 0.0

    return CustomerPeriodSummary(
        customer_id=customer_id,
        opening_balance=opening,
        period_credit=credit,
        period_payment=payment,
        closing_balance=opening + credit - payment,
        totals=customer_totals(db, customer_id),
    )


# -------------------------------------------------
# (b) all customers, one batched pass
# -------------------------------------------------
ALL_CUSTOMERS_SQL = text(
    """
    select c.id,
           c.name,
           c.phone,
           c.email,
           case
               when :start is null then 0
               else (select coalesce(sum(case when t2.type = 'credit' then t2.amount else -t2.amount end), 0)
                     from transactions t2
                     where t2.customer_id = c.id
                       and t2.date < :start)
               end as opening_balance,
           coalesce(sum(case
                            when t.type = 'credit'
                                and (:start is null or t.date >= :start)
                                and (:end is null or t.date <= :end)
                                then t.amount end), 0) as period_credit,
           coalesce(sum(case
                            when t.type = 'payment'
                                and (:start is null or t.date >= :start)
                                and (:end is null or t.date <= :end)
                                then t.amount end), 0) as period_payment
    from customers c
             left join transactions t on t.customer_id = c.id
    group by c.id, c.name, c.phone, c.email
    order by c.name, c.id
    """
)


def all_customers_summary(db: Session, period: Optional[ResolvedPeriod] = None) -> list[CustomerSummaryRow]:
    start, end = _bounds(period)
    rows = db.execute(ALL_CUSTOMERS_SQL, {"start": start, "end": end}).mappings().all()

    out = []
    for r in rows:
        opening = num(r["opening_balance"])
        credit = num(r["period_credit"])
        payment = num(r["period_payment"])
        out.append(
            CustomerSummaryRow(
                id=r["id"],
                name=r["name"],
                phone=r["phone"],
                email=r["email"],
                opening=opening,
                period_credit=credit,
                period_payment=payment,
                closing=opening + (credit - payment),
            )
        )
    return out


def transaction_totals(db: Session, period: Optional[ResolvedPeriod] = None) -> dict:
    """Credit / payment / net across every customer inside a period."""
    start, end = _bounds(period)
    row = db.execute(
        text(
            """
            select coalesce(sum(case when type = 'credit' then amount else 0 end), 0)  as credit,
                   coalesce(sum(case when type = 'payment' then amount else 0 end), 0) as payment
            from transactions
            where (:start is null or date >= :start)
              and (:end is null or date <= :end)
            """
        ),
        {"start": start, "end": end},
    ).mappings().first()

    credit = num(row["credit"]) if row else 0.0
    payment = num(row["payment"]) if row else 0.0
    return {"credit": credit, "payment": payment, "net": credit - payment}


def total_due_all_customers(db: Session) -> float:
    """Outstanding debt across all customers, all time."""
    value = db.execute(
        text(
            """
            select coalesce(sum(case when type = 'credit' then amount else -amount end), 0) as due
            from transactions
            """
        )
    ).scalar()
    return num(value)


# -------------------------------------------------
# (c) sales and expenses
# -------------------------------------------------
def sales_period_summary(db: Session, period: Optional[ResolvedPeriod] = None) -> SalesSummary:
    """
    Per-fuel totals plus an overall total.

    The overall total is summed over individual readings, the per-fuel totals
    over the same readings grouped by fuel; both walk one row list so no
    reading can be dropped by the grouping.
    """
    start, end = _bounds(period)
    rows = ledger_store.list_sales_readings(db, start=start, end=end)

    grouped = {ft: FuelTotal(ft) for ft in FUEL_TYPES}
    total_litres = 0.0
    total_value = 0.0

    for r in rows:
        litres = num(r["sales_litres"])
        value = num(r["sales_value"])
        total_litres += litres
        total_value += value

        bucket = grouped.get(r["fuel_type"])
        if bucket is None:
            logger.warning("Reading %s has unknown fuel type %r", r["id"], r["fuel_type"])
            bucket = grouped.setdefault(r["fuel_type"], FuelTotal(r["fuel_type"]))
        bucket.total_litres += litres
        bucket.total_value += value

    return SalesSummary(
        by_fuel=list(grouped.values()),
        total_litres=total_litres,
        total_value=total_value,
        reading_count=len(rows),
    )


def expenses_period_summary(db: Session, period: Optional[ResolvedPeriod] = None) -> ExpensesSummary:
    start, end = _bounds(period)
    expenses = ledger_store.list_expenses(db, start=start, end=end)

    groups: dict[str, ExpenseCategoryTotal] = {}
    total = 0.0
    for e in expenses:
        amount = num(e.amount)
        total += amount
        g = groups.get(e.description)
        if g is None:
            g = groups[e.description] = ExpenseCategoryTotal(e.description, 0.0, 0)
        g.total_amount += amount
        g.count += 1

    by_category = sorted(groups.values(), key=lambda g: (-g.total_amount, g.description))
    return ExpensesSummary(by_category=by_category, total_amount=total, count=len(expenses))
