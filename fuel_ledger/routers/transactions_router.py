# fuel_ledger/routers/transactions_router.py

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fuel_ledger.core.errors import LedgerError
from fuel_ledger.routers.deps import http_error, period_query
from fuel_ledger.schemas.transaction_schemas import TransactionOut
from fuel_ledger.services import aggregation, ledger_store
from fuel_ledger.utils.database import get_db
from fuel_ledger.utils.period import ResolvedPeriod

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=list[TransactionOut])
def list_transactions(
        customer_id: Optional[int] = Query(None),
        period: ResolvedPeriod = Depends(period_query),
        db: Session = Depends(get_db),
):
    return ledger_store.list_transactions(
        db, customer_id=customer_id, start=period.start_date, end=period.end_date, newest_first=True
    )


@router.get("/totals")
def transaction_totals(period: ResolvedPeriod = Depends(period_query), db: Session = Depends(get_db)):
    return {
        **aggregation.transaction_totals(db, period),
        "total_due": aggregation.total_due_all_customers(db),
    }


@router.delete("/{transaction_id}")
def delete_transaction(transaction_id: int, db: Session = Depends(get_db)):
    try:
        ledger_store.delete_transaction(db, transaction_id)
    except LedgerError as e:
        raise http_error(e)
    return {"message": "Transaction deleted successfully"}
