# fuel_ledger/routers/dashboard_router.py

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fuel_ledger.core.errors import LedgerError
from fuel_ledger.routers.deps import http_error
from fuel_ledger.schemas.dashboard_schemas import DashboardOut
from fuel_ledger.services import dashboard
from fuel_ledger.utils.database import get_db

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardOut)
def get_dashboard(
        month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$", description="YYYY-MM, default current"),
        db: Session = Depends(get_db),
):
    try:
        return dashboard.compose_dashboard(db, month)
    except LedgerError as e:
        raise http_error(e)
