# fuel_ledger/routers/reports_router.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from fuel_ledger.core.errors import LedgerError
from fuel_ledger.routers.deps import http_error, period_query, period_from
from fuel_ledger.schemas.report_schemas import (
    ExportRequest,
    ExportResultOut,
    DefaultFilenameOut,
    ReportFormat,
)
from fuel_ledger.services import csv_reports, ledger_store, pdf_reports, report_data
from fuel_ledger.utils.database import get_db
from fuel_ledger.utils.period import ResolvedPeriod

router = APIRouter(prefix="/reports", tags=["Reports"])

EXPORTERS = {
    ("customers_summary", "csv"): csv_reports.export_customers_summary_csv,
    ("customers_summary", "pdf"): pdf_reports.export_customers_summary_pdf,
    ("sales", "csv"): csv_reports.export_sales_csv,
    ("sales", "pdf"): pdf_reports.export_sales_pdf,
    ("expenses", "csv"): csv_reports.export_expenses_csv,
    ("expenses", "pdf"): pdf_reports.export_expenses_pdf,
}

CUSTOMER_EXPORTERS = {
    "csv": csv_reports.export_customer_csv,
    "pdf": pdf_reports.export_customer_pdf,
}


# ==========================================================
# JSON previews (same datasets the files are rendered from)
# ==========================================================

@router.get("/customer/{customer_id}")
def customer_report(
        customer_id: int,
        period: ResolvedPeriod = Depends(period_query),
        db: Session = Depends(get_db),
):
    data = report_data.customer_report(db, customer_id, period)
    if data is None:
        raise HTTPException(404, "Customer not found")
    return data


@router.get("/customers-summary")
def customers_summary_report(period: ResolvedPeriod = Depends(period_query), db: Session = Depends(get_db)):
    return report_data.customers_summary_report(db, period)


@router.get("/sales")
def sales_report(period: ResolvedPeriod = Depends(period_query), db: Session = Depends(get_db)):
    return report_data.sales_report(db, period)


@router.get("/expenses")
def expenses_report(period: ResolvedPeriod = Depends(period_query), db: Session = Depends(get_db)):
    return report_data.expenses_report(db, period)


@router.get("/default-filename", response_model=DefaultFilenameOut)
def default_filename(
        kind: str = Query(..., pattern="^(customer|customers_summary|sales|expenses)$"),
        fmt: ReportFormat = Query(ReportFormat.CSV),
        customer_id: Optional[int] = Query(None),
        db: Session = Depends(get_db),
):
    customer = None
    if kind == "customer":
        if customer_id is None:
            raise HTTPException(400, "customer_id is required for customer reports")
        try:
            customer = ledger_store.require_customer(db, customer_id)
        except LedgerError as e:
            raise http_error(e)
    return {"filename": report_data.default_filename(kind, fmt.value, customer)}


# ==========================================================
# FILE EXPORTS
# ==========================================================

@router.post("/customer/{customer_id}/export/{fmt}", response_model=ExportResultOut)
def export_customer(
        customer_id: int,
        fmt: ReportFormat,
        payload: ExportRequest,
        db: Session = Depends(get_db),
):
    exporter = CUSTOMER_EXPORTERS[fmt.value]
    try:
        result = exporter(db, customer_id, payload.file_path, period_from(payload))
    except LedgerError as e:
        raise http_error(e)
    return result.as_dict()


@router.post("/{kind}/export/{fmt}", response_model=ExportResultOut)
def export_report(
        kind: str,
        fmt: ReportFormat,
        payload: ExportRequest,
        db: Session = Depends(get_db),
):
    exporter = EXPORTERS.get((kind.replace("-", "_"), fmt.value))
    if exporter is None:
        raise HTTPException(404, f"Unknown report: {kind}")
    try:
        result = exporter(db, payload.file_path, period_from(payload))
    except LedgerError as e:
        raise http_error(e)
    return result.as_dict()
