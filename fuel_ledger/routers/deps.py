# fuel_ledger/routers/deps.py

from datetime import date
from typing import Optional

from fastapi import HTTPException, Query

from fuel_ledger.core.errors import LedgerError, ValidationFailed, BackupError
from fuel_ledger.schemas.report_schemas import PeriodMode, ReportPeriodIn
from fuel_ledger.utils.period import ResolvedPeriod, resolve_period


def http_error(e: LedgerError) -> HTTPException:
    """Domain error -> HTTPException carrying the same status and message(s)."""
    if isinstance(e, ValidationFailed):
        return HTTPException(e.status_code, e.errors)
    if isinstance(e, BackupError):
        return HTTPException(e.status_code, {"success": False, "error": e.message})
    return HTTPException(e.status_code, e.message)


def period_query(
        mode: PeriodMode = Query(PeriodMode.ALL),
        month: Optional[str] = Query(None, description="YYYY-MM, used when mode=month"),
        start_date: Optional[date] = Query(None),
        end_date: Optional[date] = Query(None),
) -> ResolvedPeriod:
    return resolve_period(mode.value, month=month, start_date=start_date, end_date=end_date)


def period_from(payload: ReportPeriodIn) -> ResolvedPeriod:
    return resolve_period(
        payload.mode,
        month=payload.month,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
