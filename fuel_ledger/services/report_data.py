"""
Report datasets shared by the CSV and PDF renderers.

Each builder returns a plain dict; the renderers only lay it out. A builder
returns None when the subject does not exist (export is then reported as
cancelled, not failed).
"""
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Callable

from sqlalchemy.orm import Session

from fuel_ledger.core.config import STATION_NAME
from fuel_ledger.core.errors import ReportWriteError
from fuel_ledger.services import aggregation, ledger_store
from fuel_ledger.utils.calculations import num, snapshot_price
from fuel_ledger.utils.period import ResolvedPeriod, period_label, ALL_TIME

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    cancelled: bool
    file_path: Optional[str] = None

    def as_dict(self) -> dict:
        return {"cancelled": self.cancelled, "file_path": self.file_path}


CANCELLED = ExportResult(cancelled=True)


def generated_stamp() -> str:
    return datetime.now().strftime("%d/%m/%Y, %I:%M:%S %p")


def safe_name(name: Optional[str], fallback: str) -> str:
    cleaned = re.sub(r"\W+", "_", name or "")
    return cleaned or fallback


def default_filename(kind: str, fmt: str, customer=None) -> str:
    if kind == "customer":
        return f"Customer_{safe_name(customer.name, f'customer_{customer.id}')}_report.{fmt}"
    return {
        "customers_summary": f"Customers_Summary.{fmt}",
        "sales": f"Sales_Report.{fmt}",
        "expenses": f"Expenses_Report.{fmt}",
    }[kind]


def _header(subtitle: str, period: ResolvedPeriod) -> dict:
    return {
        "title": STATION_NAME,
        "subtitle": subtitle,
        "period_label": period_label(period),
        "generated": f"Generated: {generated_stamp()}",
    }


# -------------------------------------------------
# Builders
# -------------------------------------------------
def customer_report(db: Session, customer_id: int, period: ResolvedPeriod = ALL_TIME) -> Optional[dict]:
    customer = ledger_store.get_customer(db, customer_id)
    if not customer:
        return None

    summary = aggregation.customer_period_summary(db, customer_id, period)
    txs = ledger_store.list_transactions(
        db, customer_id=customer_id, start=period.start_date, end=period.end_date
    )

    return {
        **_header("Customer Credit Report", period),
        "customer": {
            "id": customer.id,
            "name": customer.name,
            "phone": customer.phone or "",
            "email": customer.email or "",
            "notes": customer.notes or "",
        },
        "transactions": [
            {"type": t.type, "date": t.date, "amount": num(t.amount), "note": t.note or ""}
            for t in txs
        ],
        "summary": summary,
    }


def customers_summary_report(db: Session, period: ResolvedPeriod = ALL_TIME) -> dict:
    return {
        **_header("Customers Summary Report", period),
        "rows": aggregation.all_customers_summary(db, period),
    }


def sales_report(db: Session, period: ResolvedPeriod = ALL_TIME) -> dict:
    readings = ledger_store.list_sales_readings(db, start=period.start_date, end=period.end_date)
    rows = [
        {
            "date": r["date"],
            "label": r["label"],
            "fuel_type": r["fuel_type"],
            "opening": num(r["opening"]),
            "closing": num(r["closing"]),
            "sales_litres": num(r["sales_litres"]),
            "sales_value": num(r["sales_value"]),
            "unit_price": snapshot_price(r["fuel_type"], r["petrol_price"], r["diesel_price"]),
        }
        for r in readings
    ]
    return {
        **_header("Sales Report", period),
        "rows": rows,
        "summary": aggregation.sales_period_summary(db, period),
    }


def expenses_report(db: Session, period: ResolvedPeriod = ALL_TIME) -> dict:
    expenses = ledger_store.list_expenses(db, start=period.start_date, end=period.end_date)
    return {
        **_header("Expenses Report", period),
        "rows": [
            {"id": e.id, "date": e.date, "description": e.description, "amount": num(e.amount)}
            for e in expenses
        ],
        "summary": aggregation.expenses_period_summary(db, period),
    }


# -------------------------------------------------
# File output
# -------------------------------------------------
def write_report_file(file_path: Optional[str], render: Callable[[], bytes]) -> ExportResult:
    """
    Render then write the report. No path means the save dialog was closed.

    The document is rendered fully in memory first; a failed write removes
    whatever part of the file reached the disk.
    """
    if not file_path:
        return CANCELLED

    content = render()
    path = Path(file_path)
    try:
        with open(path, "wb") as f:
            f.write(content)
    except OSError as e:
        logger.error("Writing report to %s failed: %s", path, e)
        try:
            if path.exists():
                os.remove(path)
        except OSError:
            pass
        raise ReportWriteError(f"Could not write report to {path}: {e.strerror or e}")

    logger.info("Report written to %s (%d bytes)", path, len(content))
    return ExportResult(cancelled=False, file_path=str(path))
