import csv

import pytest

from fuel_ledger.core.config import STATION_NAME
from fuel_ledger.core.errors import ReportWriteError
from fuel_ledger.services import csv_reports, ledger_store, pdf_reports, report_data
from fuel_ledger.services.sales_reconciliation import save_readings_for_date
from fuel_ledger.utils.period import resolve_period

JAN = resolve_period("month", month="2024-01")


def _read_csv(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def test_customer_csv_layout(db_session, customer_a, tmp_path):
    period = resolve_period("range", start_date="2024-01-10", end_date="2024-01-31")
    target = tmp_path / "customer.csv"

    result = csv_reports.export_customer_csv(db_session, customer_a.id, str(target), period)
    assert not result.cancelled
    assert result.file_path == str(target)

    rows = _read_csv(target)
    assert rows[0] == [STATION_NAME]
    assert rows[1] == ["Customer Credit Report"]
    assert rows[2] == ["Period: 2024-01-10 to 2024-01-31"]
    assert rows[3][0].startswith("Generated: ")
    assert rows[5] == ["Customer Name", "Phone", "Email", "Notes"]
    assert rows[6] == ["A", "9000000001", "", ""]
    assert rows[8] == ["Opening Balance", "Credits in Period", "Payments in Period", "Closing Balance"]
    assert rows[9] == ["1000", "0", "400", "600"]
    assert rows[11] == ["Type", "Date", "Amount", "Note"]
    assert rows[12] == ["payment", "2024-01-20", "400", ""]
    assert rows[14] == ["Total Credit", "Total Payment", "Total Due"]
    assert rows[15] == ["1000", "400", "600"]


def test_sales_csv_layout(priced_nozzles, tmp_path):
    save_readings_for_date(priced_nozzles, "2024-01-01", [{"nozzle_id": 1, "opening": 100, "closing": 150}])
    target = tmp_path / "sales.csv"

    csv_reports.export_sales_csv(priced_nozzles, str(target), JAN)

    rows = _read_csv(target)
    assert rows[1] == ["Sales Report"]
    assert rows[2] == ["Period: 2024-01"]
    assert rows[5] == ["Summary:"]
    assert rows[6] == ["Fuel Type", "Total Litres", "Total Value (Rs)"]
    assert rows[7] == ["PETROL", "50.00", "4775.00"]
    assert rows[8] == ["DIESEL", "0.00", "0.00"]
    assert rows[10] == ["TOTAL", "50.00", "4775.00"]
    assert rows[12] == [
        "Date", "Label", "Fuel Type", "Opening (L)", "Closing (L)",
        "Sales (L)", "Sales Value (Rs)", "Unit Price (Rs/L)",
    ]
    assert rows[13] == ["2024-01-01", "Nozzle 1", "PETROL", "100", "150", "50", "4775", "95.5"]


def test_expenses_csv_layout(db_session, tmp_path):
    ledger_store.insert_expense(db_session, {"date": "2024-01-02", "description": "Electricity", "amount": 1200})
    ledger_store.insert_expense(db_session, {"date": "2024-01-05", "description": "Tea", "amount": 35.5})
    target = tmp_path / "expenses.csv"

    csv_reports.export_expenses_csv(db_session, str(target), JAN)

    rows = _read_csv(target)
    assert rows[6] == ["Description", "Total Amount (Rs)", "Count"]
    assert rows[7] == ["Electricity", "1200.00", "1"]
    assert rows[9] == ["TOTAL", "1235.50", "2"]
    assert rows[11] == ["Date", "Description", "Amount (Rs)"]
    assert rows[12] == ["2024-01-05", "Tea", "35.5"]
    assert rows[13] == ["2024-01-02", "Electricity", "1200"]


def test_customers_summary_csv(db_session, customer_a, tmp_path):
    target = tmp_path / "summary.csv"
    csv_reports.export_customers_summary_csv(db_session, str(target), JAN)
    rows = _read_csv(target)
    assert rows[5][:2] == ["Customer ID", "Name"]
    assert rows[6] == [str(customer_a.id), "A", "9000000001", "", "0", "1000", "400", "600"]


def test_missing_path_means_cancelled(db_session, customer_a):
    assert csv_reports.export_sales_csv(db_session, None).cancelled
    assert pdf_reports.export_expenses_pdf(db_session, "").cancelled
    assert csv_reports.export_customer_csv(db_session, customer_a.id, None).cancelled


def test_unknown_customer_is_cancelled(db_session, tmp_path):
    target = tmp_path / "ghost.csv"
    result = csv_reports.export_customer_csv(db_session, 4242, str(target))
    assert result.cancelled
    assert not target.exists()


def test_write_failure_raises_and_leaves_no_file(db_session, tmp_path):
    target = tmp_path / "no-such-dir" / "sales.csv"
    with pytest.raises(ReportWriteError):
        csv_reports.export_sales_csv(db_session, str(target))
    assert not target.exists()


@pytest.mark.parametrize("exporter", [
    pdf_reports.export_sales_pdf,
    pdf_reports.export_expenses_pdf,
    pdf_reports.export_customers_summary_pdf,
])
def test_pdf_exports_write_pdf(priced_nozzles, customer_a, tmp_path, exporter):
    save_readings_for_date(priced_nozzles, "2024-01-01", [{"nozzle_id": 4, "opening": 1, "closing": 9}])
    ledger_store.insert_expense(priced_nozzles, {"date": "2024-01-03", "description": "Rent & <misc>", "amount": 10})
    target = tmp_path / "report.pdf"

    result = exporter(priced_nozzles, str(target), JAN)

    assert not result.cancelled
    assert target.read_bytes().startswith(b"%PDF")


def test_customer_pdf(db_session, customer_a, tmp_path):
    target = tmp_path / "customer.pdf"
    result = pdf_reports.export_customer_pdf(db_session, customer_a.id, str(target))
    assert not result.cancelled
    assert target.read_bytes().startswith(b"%PDF")


def test_default_filenames(db_session, customer_a):
    assert report_data.default_filename("customer", "csv", customer_a) == "Customer_A_report.csv"
    assert report_data.default_filename("sales", "pdf") == "Sales_Report.pdf"
    assert report_data.default_filename("customers_summary", "csv") == "Customers_Summary.csv"


def test_deleting_after_export_leaves_file_untouched(db_session, customer_a, tmp_path):
    target = tmp_path / "before.csv"
    csv_reports.export_customer_csv(db_session, customer_a.id, str(target))
    before = target.read_bytes()

    for tx in ledger_store.list_transactions(db_session, customer_id=customer_a.id):
        ledger_store.delete_transaction(db_session, tx.id)

    assert target.read_bytes() == before


def test_free_text_is_always_quoted(db_session, customer_a, tmp_path):
    ledger_store.add_transaction(
        db_session,
        {"customer_id": customer_a.id, "amount": 12.5, "type": "credit", "date": "2024-01-25", "note": 'said "later"'},
    )
    target = tmp_path / "customer.csv"
    csv_reports.export_customer_csv(db_session, customer_a.id, str(target))

    lines = target.read_text(encoding="utf-8").split("\n")
    assert '"A","9000000001","",""' in lines
    assert '"credit","2024-01-05",1000,""' in lines
    assert '"credit","2024-01-25",12.5,"said ""later"""' in lines
    assert "1012.5,400,612.5" in lines
