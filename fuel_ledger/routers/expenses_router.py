# fuel_ledger/routers/expenses_router.py

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fuel_ledger.core.errors import LedgerError
from fuel_ledger.routers.deps import http_error, period_query
from fuel_ledger.schemas.expense_schemas import ExpenseCreate, ExpenseUpdate, ExpenseOut
from fuel_ledger.services import aggregation, ledger_store
from fuel_ledger.utils.database import get_db
from fuel_ledger.utils.period import ResolvedPeriod

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.get("", response_model=list[ExpenseOut])
def list_expenses(period: ResolvedPeriod = Depends(period_query), db: Session = Depends(get_db)):
    return ledger_store.list_expenses(db, start=period.start_date, end=period.end_date)


@router.get("/summary")
def expenses_summary(period: ResolvedPeriod = Depends(period_query), db: Session = Depends(get_db)):
    return aggregation.expenses_period_summary(db, period)


@router.get("/by-date/{day}", response_model=list[ExpenseOut])
def expenses_by_date(day: date, db: Session = Depends(get_db)):
    return ledger_store.list_expenses_by_date(db, day.isoformat())


@router.post("", response_model=ExpenseOut)
def create_expense(payload: ExpenseCreate, db: Session = Depends(get_db)):
    try:
        return ledger_store.insert_expense(db, payload.model_dump())
    except LedgerError as e:
        raise http_error(e)


@router.put("/{expense_id}", response_model=ExpenseOut)
def update_expense(expense_id: int, payload: ExpenseUpdate, db: Session = Depends(get_db)):
    try:
        return ledger_store.update_expense(db, expense_id, payload.model_dump(exclude_unset=True))
    except LedgerError as e:
        raise http_error(e)


@router.delete("/{expense_id}")
def delete_expense(expense_id: int, db: Session = Depends(get_db)):
    try:
        ledger_store.delete_expense(db, expense_id)
    except LedgerError as e:
        raise http_error(e)
    return {"message": "Expense deleted successfully"}
