"""
Ledger Store: CRUD primitives over customers, transactions, nozzles,
sales readings and expenses.

Everything above this module (aggregation, reconciliation, reports) reads
and writes through these functions.
"""
import logging
from typing import Optional, Iterable

from sqlalchemy import text, or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fuel_ledger.core.errors import NotFoundError, ValidationFailed
from fuel_ledger.models import Customer, Transaction, Nozzle, SalesReading, Expense
from fuel_ledger.models.nozzle_model import FUEL_TYPES
from fuel_ledger.models.transaction_model import TRANSACTION_TYPES
from fuel_ledger.utils.calculations import num

logger = logging.getLogger(__name__)

TABLES = ["customers", "transactions", "nozzles", "sales_readings", "expenses"]


def _commit(db: Session):
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        msg = str(e.orig) if getattr(e, "orig", None) else str(e)
        raise ValidationFailed([f"Database constraint failed: {msg}"])


def _date_bounds(q, column, start: Optional[str], end: Optional[str]):
    if start:
        q = q.filter(column >= start)
    if end:
        q = q.filter(column <= end)
    return q


# -------------------------------------------------
# Customers
# -------------------------------------------------
def list_customers(db: Session) -> list[Customer]:
    return db.query(Customer).order_by(Customer.name.asc(), Customer.id.asc()).all()


def search_customers(db: Session, q: Optional[str]) -> list[Customer]:
    query = (q or "").strip()
    if not query:
        return list_customers(db)
    like = f"%{query}%"
    return (
        db.query(Customer)
        .filter(or_(Customer.name.like(like), Customer.phone.like(like), Customer.email.like(like)))
        .order_by(Customer.name.asc(), Customer.id.asc())
        .all()
    )


def get_customer(db: Session, customer_id: int) -> Optional[Customer]:
    return db.query(Customer).filter(Customer.id == customer_id).first()


def require_customer(db: Session, customer_id: int) -> Customer:
    customer = get_customer(db, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def _clean_customer_fields(data: dict) -> dict:
    out = {}
    for key in ("name", "phone", "email", "notes"):
        if key in data:
            out[key] = (data[key] or "").strip()
    return out


def create_customer(db: Session, data: dict) -> Customer:
    fields = _clean_customer_fields(data)
    if not fields.get("name"):
        raise ValidationFailed(["Customer name is required"])

    customer = Customer(
        name=fields["name"],
        phone=fields.get("phone", ""),
        email=fields.get("email", ""),
        notes=fields.get("notes", ""),
    )
    db.add(customer)
    _commit(db)
    db.refresh(customer)
    logger.info("Created customer %s (%s)", customer.id, customer.name)
    return customer


def update_customer(db: Session, customer_id: int, data: dict) -> Customer:
    customer = require_customer(db, customer_id)
    fields = _clean_customer_fields(data)
    if "name" in fields and not fields["name"]:
        raise ValidationFailed(["Customer name is required"])

    for k, v in fields.items():
        setattr(customer, k, v)

    _commit(db)
    db.refresh(customer)
    return customer


# -------------------------------------------------
# Transactions
# -------------------------------------------------
def list_transactions(
        db: Session,
        customer_id: Optional[int] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        newest_first: bool = False,
) -> list[Transaction]:
    q = db.query(Transaction)
    if customer_id is not None:
        q = q.filter(Transaction.customer_id == customer_id)
    q = _date_bounds(q, Transaction.date, start, end)

    if newest_first:
        return q.order_by(Transaction.date.desc(), Transaction.id.desc()).all()
    return q.order_by(Transaction.date.asc(), Transaction.id.asc()).all()


def add_transaction(db: Session, data: dict) -> Transaction:
    errors = []
    amount = num(data.get("amount"))
    if amount <= 0:
        errors.append("Amount must be greater than 0")
    if data.get("type") not in TRANSACTION_TYPES:
        errors.append("Type must be 'credit' or 'payment'")
    if not data.get("date"):
        errors.append("Date is required")
    if errors:
        raise ValidationFailed(errors)

    require_customer(db, data["customer_id"])

    tx = Transaction(
        customer_id=data["customer_id"],
        amount=amount,
        type=data["type"],
        date=str(data["date"]),
        note=data.get("note"),
    )
    db.add(tx)
    _commit(db)
    db.refresh(tx)
    logger.info(
        "Recorded %s of %.2f for customer %s on %s", tx.type, tx.amount, tx.customer_id, tx.date
    )
    return tx


def delete_transaction(db: Session, transaction_id: int) -> None:
    tx = db.query(Transaction).filter(Transaction.id == transaction_id).first()
    if not tx:
        raise NotFoundError("Transaction not found")
    db.delete(tx)
    _commit(db)
    logger.info("Deleted transaction %s", transaction_id)


# -------------------------------------------------
# Nozzles
# -------------------------------------------------
def list_nozzles(db: Session) -> list[Nozzle]:
    return db.query(Nozzle).order_by(Nozzle.id.asc()).all()


def get_nozzle(db: Session, nozzle_id: int) -> Optional[Nozzle]:
    return db.query(Nozzle).filter(Nozzle.id == nozzle_id).first()


def upsert_nozzle(db: Session, nozzle_id: int, data: dict) -> Nozzle:
    errors = []
    if "fuel_type" in data and data["fuel_type"] not in FUEL_TYPES:
        errors.append(f"Fuel type must be one of {', '.join(FUEL_TYPES)}")
    if "price_per_litre" in data and num(data["price_per_litre"]) < 0:
        errors.append("Price per litre cannot be negative")
    if "label" in data and not (data["label"] or "").strip():
        errors.append("Label is required")
    if errors:
        raise ValidationFailed(errors)

    nozzle = get_nozzle(db, nozzle_id)
    if not nozzle:
        if "fuel_type" not in data or "label" not in data:
            raise NotFoundError("Nozzle not found")
        nozzle = Nozzle(id=nozzle_id, price_per_litre=0)
        db.add(nozzle)

    for k in ("label", "fuel_type"):
        if k in data:
            setattr(nozzle, k, data[k].strip() if k == "label" else data[k])
    if "price_per_litre" in data:
        nozzle.price_per_litre = num(data["price_per_litre"])

    _commit(db)
    db.refresh(nozzle)
    return nozzle


# -------------------------------------------------
# Sales readings
# -------------------------------------------------
def list_sales_readings(
        db: Session,
        start: Optional[str] = None,
        end: Optional[str] = None,
        nozzle_id: Optional[int] = None,
) -> list[dict]:
    """Readings joined with their nozzle, ordered date desc then label."""
    sql = """
          select sr.id,
                 sr.date,
                 sr.nozzle_id,
                 n.label,
                 n.fuel_type,
                 sr.opening,
                 sr.closing,
                 sr.sales_litres,
                 sr.sales_value,
                 sr.petrol_price,
                 sr.diesel_price
          from sales_readings sr
                   join nozzles n on n.id = sr.nozzle_id
          where 1 = 1 \
          """
    params = {}

    if start:
        sql += " and sr.date >= :start"
        params["start"] = start
    if end:
        sql += " and sr.date <= :end"
        params["end"] = end
    if nozzle_id is not None:
        sql += " and sr.nozzle_id = :nid"
        params["nid"] = nozzle_id

    sql += " order by sr.date desc, n.label asc"

    rows = db.execute(text(sql), params).mappings().all()
    return [dict(r) for r in rows]


def list_sales_by_date(db: Session, day: str) -> list[SalesReading]:
    return (
        db.query(SalesReading)
        .filter(SalesReading.date == day)
        .order_by(SalesReading.nozzle_id.asc())
        .all()
    )


UPSERT_READING_SQL = text(
    """
    REPLACE INTO sales_readings
        (date, nozzle_id, opening, closing, sales_litres, sales_value, petrol_price, diesel_price)
    VALUES (:date, :nozzle_id, :opening, :closing, :sales_litres, :sales_value, :petrol_price, :diesel_price)
    """
)


def upsert_sales_readings(db: Session, day: str, rows: Iterable[dict]) -> int:
    """Replace the (date, nozzle) rows for one date in a single transaction."""
    params = [{**r, "date": day} for r in rows]
    if not params:
        return 0
    try:
        db.execute(UPSERT_READING_SQL, params)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Saving sales readings for %s failed; rolled back", day)
        raise
    logger.info("Saved %d sales readings for %s", len(params), day)
    return len(params)


# -------------------------------------------------
# Expenses
# -------------------------------------------------
def list_expenses(db: Session, start: Optional[str] = None, end: Optional[str] = None) -> list[Expense]:
    q = _date_bounds(db.query(Expense), Expense.date, start, end)
    return q.order_by(Expense.date.desc(), Expense.created_at.desc(), Expense.id.desc()).all()


def list_expenses_by_date(db: Session, day: str) -> list[Expense]:
    return (
        db.query(Expense)
        .filter(Expense.date == day)
        .order_by(Expense.created_at.desc(), Expense.id.desc())
        .all()
    )


def _validate_expense(data: dict, partial: bool = False) -> None:
    errors = []
    if not partial or "description" in data:
        if not (data.get("description") or "").strip():
            errors.append("Description is required")
    if not partial or "amount" in data:
        if num(data.get("amount")) <= 0:
            errors.append("Amount must be greater than 0")
    if not partial or "date" in data:
        if not data.get("date"):
            errors.append("Date is required")
    if errors:
        raise ValidationFailed(errors)


def insert_expense(db: Session, data: dict) -> Expense:
    _validate_expense(data)
    exp = Expense(
        date=str(data["date"]),
        description=data["description"].strip(),
        amount=num(data["amount"]),
    )
    db.add(exp)
    _commit(db)
    db.refresh(exp)
    logger.info("Recorded expense %s: %s %.2f", exp.id, exp.description, exp.amount)
    return exp


def update_expense(db: Session, expense_id: int, data: dict) -> Expense:
    exp = db.query(Expense).filter(Expense.id == expense_id).first()
    if not exp:
        raise NotFoundError("Expense not found")

    _validate_expense(data, partial=True)

    if "date" in data:
        exp.date = str(data["date"])
    if "description" in data:
        exp.description = data["description"].strip()
    if "amount" in data:
        exp.amount = num(data["amount"])

    _commit(db)
    db.refresh(exp)
    return exp


def delete_expense(db: Session, expense_id: int) -> None:
    exp = db.query(Expense).filter(Expense.id == expense_id).first()
    if not exp:
        raise NotFoundError("Expense not found")
    db.delete(exp)
    _commit(db)
    logger.info("Deleted expense %s", expense_id)


# -------------------------------------------------
# Maintenance
# -------------------------------------------------
def count_rows(db: Session, model) -> int:
    return db.query(func.count()).select_from(model).scalar() or 0


TABLE_MODELS = {
    "customers": Customer,
    "transactions": Transaction,
    "nozzles": Nozzle,
    "sales_readings": SalesReading,
    "expenses": Expense,
}
