# fuel_ledger/routers/customers_router.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from fuel_ledger.core.errors import LedgerError
from fuel_ledger.routers.deps import http_error, period_query
from fuel_ledger.schemas.customer_schemas import (
    CustomerCreate,
    CustomerUpdate,
    CustomerOut,
    CustomerTotalsOut,
    CustomerPeriodSummaryOut,
    CustomerSummaryRowOut,
)
from fuel_ledger.schemas.transaction_schemas import TransactionCreate, TransactionOut
from fuel_ledger.services import aggregation, ledger_store
from fuel_ledger.utils.database import get_db
from fuel_ledger.utils.period import ResolvedPeriod

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("", response_model=list[CustomerOut])
def list_customers(
        q: Optional[str] = Query(None, description="Match on name, phone or email"),
        db: Session = Depends(get_db),
):
    return ledger_store.search_customers(db, q)


@router.post("", response_model=CustomerOut)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    try:
        return ledger_store.create_customer(db, payload.model_dump())
    except LedgerError as e:
        raise http_error(e)


# all customers in one pass; declared before /{customer_id}
@router.get("/summary", response_model=list[CustomerSummaryRowOut])
def customers_summary(
        period: ResolvedPeriod = Depends(period_query),
        db: Session = Depends(get_db),
):
    return aggregation.all_customers_summary(db, period)


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    customer = ledger_store.get_customer(db, customer_id)
    if not customer:
        raise HTTPException(404, "Customer not found")
    return customer


@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)):
    try:
        return ledger_store.update_customer(db, customer_id, payload.model_dump(exclude_unset=True))
    except LedgerError as e:
        raise http_error(e)


@router.get("/{customer_id}/totals", response_model=CustomerTotalsOut)
def customer_totals(customer_id: int, db: Session = Depends(get_db)):
    try:
        ledger_store.require_customer(db, customer_id)
    except LedgerError as e:
        raise http_error(e)
    return aggregation.customer_totals(db, customer_id)


@router.get("/{customer_id}/period-summary", response_model=CustomerPeriodSummaryOut)
def customer_period_summary(
        customer_id: int,
        period: ResolvedPeriod = Depends(period_query),
        db: Session = Depends(get_db),
):
    try:
        ledger_store.require_customer(db, customer_id)
    except LedgerError as e:
        raise http_error(e)
    return aggregation.customer_period_summary(db, customer_id, period)


# ==========================================================
# TRANSACTIONS OF A CUSTOMER
# ==========================================================

@router.get("/{customer_id}/transactions", response_model=list[TransactionOut])
def list_customer_transactions(
        customer_id: int,
        period: ResolvedPeriod = Depends(period_query),
        newest_first: bool = Query(True),
        db: Session = Depends(get_db),
):
    try:
        ledger_store.require_customer(db, customer_id)
    except LedgerError as e:
        raise http_error(e)
    return ledger_store.list_transactions(
        db,
        customer_id=customer_id,
        start=period.start_date,
        end=period.end_date,
        newest_first=newest_first,
    )


@router.post("/{customer_id}/transactions", response_model=TransactionOut)
def add_transaction(customer_id: int, payload: TransactionCreate, db: Session = Depends(get_db)):
    try:
        return ledger_store.add_transaction(db, {**payload.model_dump(), "customer_id": customer_id})
    except LedgerError as e:
        raise http_error(e)
