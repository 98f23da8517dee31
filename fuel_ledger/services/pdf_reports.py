"""
PDF report generation (reportlab platypus).

Every report: station title, report subtitle, generated stamp and period
label on top, a summary block, then a zebra-striped table whose header row
repeats on each page.
"""
from io import BytesIO
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from sqlalchemy.orm import Session

from fuel_ledger.services import report_data
from fuel_ledger.services.report_data import ExportResult, CANCELLED
from fuel_ledger.utils.calculations import currency, fmt2
from fuel_ledger.utils.period import ResolvedPeriod, ALL_TIME

HEADER_FILL = colors.HexColor("#f0f0f0")
ZEBRA_FILL = colors.HexColor("#fafafa")

_styles = getSampleStyleSheet()

TITLE_STYLE = ParagraphStyle(
    "ReportTitle",
    parent=_styles["Heading1"],
    fontSize=18,
    textColor=colors.HexColor("#111111"),
    alignment=TA_CENTER,
    spaceAfter=4,
)
SUBTITLE_STYLE = ParagraphStyle(
    "ReportSubtitle",
    parent=_styles["Normal"],
    fontSize=14,
    alignment=TA_CENTER,
    spaceAfter=6,
)
META_STYLE = ParagraphStyle(
    "ReportMeta",
    parent=_styles["Normal"],
    fontSize=9,
    textColor=colors.HexColor("#666666"),
    alignment=TA_CENTER,
)
BODY_STYLE = ParagraphStyle(
    "ReportBody",
    parent=_styles["Normal"],
    fontSize=10,
)
SECTION_STYLE = ParagraphStyle(
    "ReportSection",
    parent=_styles["Heading2"],
    fontSize=12,
    spaceAfter=4,
)
CELL_STYLE = ParagraphStyle(
    "ReportCell",
    parent=_styles["Normal"],
    fontSize=9,
)


def _esc(value) -> str:
    return (
        str(value if value is not None else "")
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def _header_block(data: dict) -> list:
    return [
        Paragraph(_esc(data["title"]), TITLE_STYLE),
        Paragraph(_esc(data["subtitle"]), SUBTITLE_STYLE),
        Paragraph(_esc(data["generated"]), META_STYLE),
        Paragraph(_esc(data["period_label"]), META_STYLE),
        Spacer(1, 0.2 * inch),
    ]


def _table(headers: list[str], rows: list[list], col_widths: list[float]) -> Table:
    body = [[Paragraph(f"<b>{_esc(h)}</b>", CELL_STYLE) for h in headers]]
    body += [[Paragraph(_esc(v), CELL_STYLE) for v in row] for row in rows]

    table = Table(body, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#e0e0e0")),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [ZEBRA_FILL, colors.white]),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
    ]))
    return table


def _fit(widths: list[float], available: float) -> list[float]:
    """Scale column widths down proportionally when they overflow the page."""
    total = sum(widths)
    if total <= available:
        return widths
    scale = available / total
    return [w * scale for w in widths]


def _page_footer(title: str):
    def draw(canvas, doc):
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(colors.grey)
        canvas.drawCentredString(doc.pagesize[0] / 2, 0.35 * inch, f"{title} - page {doc.page}")
        canvas.restoreState()
    return draw


def _build(elements: list, title: str, pagesize=A4, margin: float = 30) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=pagesize,
        leftMargin=margin,
        rightMargin=margin,
        topMargin=margin,
        bottomMargin=margin,
        title=title,
    )
    footer = _page_footer(title)
    doc.build(elements, onFirstPage=footer, onLaterPages=footer)
    return buffer.getvalue()


def _content_width(pagesize, margin: float = 30) -> float:
    return pagesize[0] - 2 * margin


# -------------------------------------------------
# Renderers
# -------------------------------------------------
def render_customer_pdf(data: dict) -> bytes:
    c = data["customer"]
    s = data["summary"]
    elements = _header_block(data)

    elements.append(Paragraph(f"Name: {_esc(c['name'])}", BODY_STYLE))
    for label, key in (("Phone", "phone"), ("Email", "email"), ("Notes", "notes")):
        if c[key]:
            elements.append(Paragraph(f"{label}: {_esc(c[key])}", BODY_STYLE))
    elements.append(Spacer(1, 0.15 * inch))

    elements.append(Paragraph(f"Opening Balance: {currency(s.opening_balance)}", BODY_STYLE))
    elements.append(Paragraph(f"Credits in Period: {currency(s.period_credit)}", BODY_STYLE))
    elements.append(Paragraph(f"Payments in Period: {currency(s.period_payment)}", BODY_STYLE))
    elements.append(Paragraph(f"Closing Balance: {currency(s.closing_balance)}", BODY_STYLE))
    elements.append(Spacer(1, 0.15 * inch))

    elements.append(Paragraph("<u>Transactions</u>", SECTION_STYLE))
    width = _content_width(A4)
    rows = [
        ["Credit" if t["type"] == "credit" else "Payment", t["date"], currency(t["amount"]), t["note"]]
        for t in data["transactions"]
    ]
    elements.append(_table(["Type", "Date", "Amount", "Note"], rows, [80, 110, 110, width - 300]))

    return _build(elements, data["subtitle"])


def render_customers_summary_pdf(data: dict) -> bytes:
    elements = _header_block(data)
    pagesize = landscape(A4)
    rows = [
        [r.id, r.name, r.phone or "", r.email or "",
         currency(r.opening), currency(r.period_credit), currency(r.period_payment), currency(r.closing)]
        for r in data["rows"]
    ]
    widths = _fit([50, 140, 90, 130, 90, 90, 90, 90], _content_width(pagesize))
    elements.append(_table(
        ["ID", "Name", "Phone", "Email", "Opening", "Period Credit", "Period Payment", "Closing"],
        rows,
        widths,
    ))
    return _build(elements, data["subtitle"], pagesize=pagesize)


def render_sales_pdf(data: dict) -> bytes:
    s = data["summary"]
    pagesize = landscape(A4)
    elements = _header_block(data)

    elements.append(Paragraph("<u>Summary by Fuel Type</u>", SECTION_STYLE))
    for ft in s.by_fuel:
        elements.append(Paragraph(
            f"{ft.fuel_type.upper()}: {fmt2(ft.total_litres)} L, {currency(ft.total_value)}", BODY_STYLE
        ))
    elements.append(Paragraph(
        f"<b>TOTAL: {fmt2(s.total_litres)} L, {currency(s.total_value)}</b>", BODY_STYLE
    ))
    elements.append(Spacer(1, 0.2 * inch))

    elements.append(Paragraph("<u>Sales Details</u>", SECTION_STYLE))
    rows = [
        [r["date"], r["label"], r["fuel_type"].upper(),
         fmt2(r["opening"]), fmt2(r["closing"]), fmt2(r["sales_litres"]),
         currency(r["sales_value"]), currency(r["unit_price"])]
        for r in data["rows"]
    ]
    widths = _fit([100, 120, 80, 90, 90, 90, 100, 100], _content_width(pagesize))
    elements.append(_table(
        ["Date", "Label", "Fuel", "Opening", "Closing", "Sales(L)", "Value", "Unit Price (Rs/L)"],
        rows,
        widths,
    ))
    return _build(elements, data["subtitle"], pagesize=pagesize)


def render_expenses_pdf(data: dict) -> bytes:
    s = data["summary"]
    elements = _header_block(data)

    elements.append(Paragraph("<u>Summary by Category</u>", SECTION_STYLE))
    for ct in s.by_category:
        elements.append(Paragraph(
            f"{_esc(ct.description)}: {currency(ct.total_amount)} ({ct.count} entries)", BODY_STYLE
        ))
    elements.append(Paragraph(
        f"<b>TOTAL: {currency(s.total_amount)} ({s.count} entries)</b>", BODY_STYLE
    ))
    elements.append(Spacer(1, 0.2 * inch))

    elements.append(Paragraph("<u>Expense Details</u>", SECTION_STYLE))
    rows = [[r["date"], r["description"], currency(r["amount"])] for r in data["rows"]]
    widths = _fit([90, 300, 110], _content_width(A4))
    elements.append(_table(["Date", "Description", "Amount (Rs)"], rows, widths))
    return _build(elements, data["subtitle"])


# -------------------------------------------------
# Exports
# -------------------------------------------------
def export_customer_pdf(
        db: Session, customer_id: int, file_path: Optional[str], period: ResolvedPeriod = ALL_TIME
) -> ExportResult:
    data = report_data.customer_report(db, customer_id, period)
    if data is None:
        return CANCELLED
    return report_data.write_report_file(file_path, lambda: render_customer_pdf(data))


def export_customers_summary_pdf(
        db: Session, file_path: Optional[str], period: ResolvedPeriod = ALL_TIME
) -> ExportResult:
    if not file_path:
        return CANCELLED
    data = report_data.customers_summary_report(db, period)
    return report_data.write_report_file(file_path, lambda: render_customers_summary_pdf(data))


def export_sales_pdf(db: Session, file_path: Optional[str], period: ResolvedPeriod = ALL_TIME) -> ExportResult:
    if not file_path:
        return CANCELLED
    data = report_data.sales_report(db, period)
    return report_data.write_report_file(file_path, lambda: render_sales_pdf(data))


def export_expenses_pdf(db: Session, file_path: Optional[str], period: ResolvedPeriod = ALL_TIME) -> ExportResult:
    if not file_path:
        return CANCELLED
    data = report_data.expenses_report(db, period)
    return report_data.write_report_file(file_path, lambda: render_expenses_pdf(data))
