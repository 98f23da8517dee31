"""
CSV renderers.

Layout per report: title lines, period label, generated stamp, blank line,
summary block, blank line, header row, data rows. Column labels are kept
stable for spreadsheets that import these files.

Detail rows go through a QUOTE_NONNUMERIC writer: free text (names, phones,
notes, labels, descriptions) is always quoted, raw numbers never are.
Headings and the fixed-point summary blocks use minimal quoting.
"""
import csv
import io
from typing import Optional

from sqlalchemy.orm import Session

from fuel_ledger.services import report_data
from fuel_ledger.services.report_data import ExportResult, CANCELLED
from fuel_ledger.utils.calculations import number, plain, fmt2
from fuel_ledger.utils.period import ResolvedPeriod, ALL_TIME


def _writers(buf: io.StringIO):
    """(plain writer, detail writer) sharing one buffer."""
    return (
        csv.writer(buf, lineterminator="\n"),
        csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_NONNUMERIC),
    )


def _head(w, data: dict, with_period: bool = True):
    w.writerow([data["title"]])
    w.writerow([data["subtitle"]])
    if with_period:
        w.writerow([data["period_label"]])
    w.writerow([data["generated"]])
    w.writerow([])


def _encode(buf: io.StringIO) -> bytes:
    return buf.getvalue().rstrip("\n").encode("utf-8")


# -------------------------------------------------
# Renderers
# -------------------------------------------------
def render_customer_csv(data: dict) -> bytes:
    buf = io.StringIO()
    w, q = _writers(buf)
    _head(w, data)

    c = data["customer"]
    w.writerow(["Customer Name", "Phone", "Email", "Notes"])
    q.writerow([c["name"], c["phone"], c["email"], c["notes"]])
    w.writerow([])

    s = data["summary"]
    w.writerow(["Opening Balance", "Credits in Period", "Payments in Period", "Closing Balance"])
    w.writerow([plain(s.opening_balance), plain(s.period_credit), plain(s.period_payment), plain(s.closing_balance)])
    w.writerow([])

    w.writerow(["Type", "Date", "Amount", "Note"])
    for t in data["transactions"]:
        q.writerow([t["type"], t["date"], number(t["amount"]), t["note"]])
    w.writerow([])

    w.writerow(["Total Credit", "Total Payment", "Total Due"])
    w.writerow([plain(s.totals.total_credit), plain(s.totals.total_payment), plain(s.totals.total_due)])
    return _encode(buf)


def render_customers_summary_csv(data: dict) -> bytes:
    buf = io.StringIO()
    w, q = _writers(buf)
    _head(w, data)

    w.writerow([
        "Customer ID", "Name", "Phone", "Email", "Opening",
        "Billing Period Credit", "Billing Period Payment", "Closing",
    ])
    for r in data["rows"]:
        q.writerow([
            r.id, r.name, r.phone or "", r.email or "",
            number(r.opening), number(r.period_credit), number(r.period_payment), number(r.closing),
        ])
    return _encode(buf)


def render_sales_csv(data: dict) -> bytes:
    buf = io.StringIO()
    w, q = _writers(buf)
    _head(w, data)

    s = data["summary"]
    w.writerow(["Summary:"])
    w.writerow(["Fuel Type", "Total Litres", "Total Value (Rs)"])
    for ft in s.by_fuel:
        w.writerow([ft.fuel_type.upper(), fmt2(ft.total_litres), fmt2(ft.total_value)])
    w.writerow(["TOTAL", fmt2(s.total_litres), fmt2(s.total_value)])
    w.writerow([])

    w.writerow([
        "Date", "Label", "Fuel Type", "Opening (L)", "Closing (L)",
        "Sales (L)", "Sales Value (Rs)", "Unit Price (Rs/L)",
    ])
    for r in data["rows"]:
        q.writerow([
            r["date"], r["label"], r["fuel_type"].upper(),
            number(r["opening"]), number(r["closing"]), number(r["sales_litres"]),
            number(r["sales_value"]), number(r["unit_price"]),
        ])
    return _encode(buf)


def render_expenses_csv(data: dict) -> bytes:
    buf = io.StringIO()
    w, q = _writers(buf)
    _head(w, data)

    s = data["summary"]
    w.writerow(["Summary:"])
    w.writerow(["Description", "Total Amount (Rs)", "Count"])
    for ct in s.by_category:
        w.writerow([ct.description, fmt2(ct.total_amount), ct.count])
    w.writerow(["TOTAL", fmt2(s.total_amount), s.count])
    w.writerow([])

    w.writerow(["Date", "Description", "Amount (Rs)"])
    for r in data["rows"]:
        q.writerow([r["date"], r["description"], number(r["amount"])])
    return _encode(buf)


# -------------------------------------------------
# Exports
# -------------------------------------------------
def export_customer_csv(
        db: Session, customer_id: int, file_path: Optional[str], period: ResolvedPeriod = ALL_TIME
) -> ExportResult:
    data = report_data.customer_report(db, customer_id, period)
    if data is None:
        return CANCELLED
    return report_data.write_report_file(file_path, lambda: render_customer_csv(data))


def export_customers_summary_csv(
        db: Session, file_path: Optional[str], period: ResolvedPeriod = ALL_TIME
) -> ExportResult:
    if not file_path:
        return CANCELLED
    data = report_data.customers_summary_report(db, period)
    return report_data.write_report_file(file_path, lambda: render_customers_summary_csv(data))


def export_sales_csv(db: Session, file_path: Optional[str], period: ResolvedPeriod = ALL_TIME) -> ExportResult:
    if not file_path:
        return CANCELLED
    data = report_data.sales_report(db, period)
    return report_data.write_report_file(file_path, lambda: render_sales_csv(data))


def export_expenses_csv(db: Session, file_path: Optional[str], period: ResolvedPeriod = ALL_TIME) -> ExportResult:
    if not file_path:
        return CANCELLED
    data = report_data.expenses_report(db, period)
    return report_data.write_report_file(file_path, lambda: render_expenses_csv(data))
