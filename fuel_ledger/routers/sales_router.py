# fuel_ledger/routers/sales_router.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fuel_ledger.core.errors import LedgerError
from fuel_ledger.routers.deps import http_error, period_query
from fuel_ledger.schemas.sales_schemas import (
    SalesSaveRequest,
    SalesReadingOut,
    SalesReadingJoinedOut,
    DefaultOpeningOut,
    DaySheetOut,
)
from fuel_ledger.services import aggregation, ledger_store, sales_reconciliation
from fuel_ledger.utils.database import get_db
from fuel_ledger.utils.period import ResolvedPeriod

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.get("", response_model=list[SalesReadingJoinedOut])
def list_sales(
        period: ResolvedPeriod = Depends(period_query),
        nozzle_id: Optional[int] = Query(None),
        db: Session = Depends(get_db),
):
    return ledger_store.list_sales_readings(
        db, start=period.start_date, end=period.end_date, nozzle_id=nozzle_id
    )


@router.get("/summary")
def sales_summary(period: ResolvedPeriod = Depends(period_query), db: Session = Depends(get_db)):
    return aggregation.sales_period_summary(db, period)


@router.get("/by-date/{day}", response_model=list[SalesReadingOut])
def sales_by_date(day: date, db: Session = Depends(get_db)):
    return ledger_store.list_sales_by_date(db, day.isoformat())


@router.get("/last-readings/{day}", response_model=list[DefaultOpeningOut])
def last_readings(day: date, db: Session = Depends(get_db)):
    """Advisory opening per nozzle: previous day's closing, else the latest before `day`."""
    defaults = sales_reconciliation.default_openings(db, day.isoformat())
    return [{"nozzle_id": nid, **d} for nid, d in sorted(defaults.items())]


@router.get("/day-sheet/{day}", response_model=DaySheetOut)
def day_sheet(day: date, db: Session = Depends(get_db)):
    sheet = sales_reconciliation.day_sheet(db, day.isoformat())
    return {
        **sheet,
        "cells": [sales_reconciliation.cell_view(n, c) for n, c in sheet["cells"]],
    }


@router.post("/save", response_model=list[SalesReadingOut])
def save_readings(payload: SalesSaveRequest, db: Session = Depends(get_db)):
    try:
        return sales_reconciliation.save_readings_for_date(
            db,
            payload.date.isoformat(),
            [e.model_dump() for e in payload.entries],
            edit_mode=payload.edit_mode,
        )
    except LedgerError as e:
        raise http_error(e)
