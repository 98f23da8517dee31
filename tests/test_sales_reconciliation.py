import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fuel_ledger.core.errors import ValidationFailed, SchemaDriftError
from fuel_ledger.migrations import ensure_sales_schema, migrate, missing_sales_columns
from fuel_ledger.models import SalesReading
from fuel_ledger.services import ledger_store, report_data
from fuel_ledger.services.sales_reconciliation import (
    EmptyCell,
    FreshCell,
    HistoricalCell,
    EditingCell,
    open_cell,
    enter_reading,
    begin_edit,
    apply_edit,
    cancel_edit,
    cell_totals,
    validate_cell,
    default_openings,
    day_sheet,
    save_readings_for_date,
    PREVIOUS_DAY,
    LAST_AVAILABLE,
)
from fuel_ledger.utils.period import resolve_period

DAY = "2024-01-01"


def _row(db, day, nozzle_id):
    return db.query(SalesReading).filter_by(date=day, nozzle_id=nozzle_id).one()


def test_save_derives_litres_and_value(priced_nozzles):
    save_readings_for_date(priced_nozzles, DAY, [{"nozzle_id": 1, "opening": 100, "closing": 150}])

    row = _row(priced_nozzles, DAY, 1)
    assert row.sales_litres == 50
    assert row.sales_value == pytest.approx(4775.0)
    assert row.petrol_price == 95.5
    assert row.diesel_price == 0


def test_diesel_price_goes_to_secondary_slot(priced_nozzles):
    save_readings_for_date(priced_nozzles, DAY, [{"nozzle_id": 4, "opening": 10, "closing": 20}])
    row = _row(priced_nozzles, DAY, 4)
    assert (row.petrol_price, row.diesel_price) == (0, 90)
    assert row.sales_value == pytest.approx(900)


def test_others_alias_primary_slot(priced_nozzles):
    save_readings_for_date(priced_nozzles, DAY, [{"nozzle_id": 8, "opening": 0, "closing": 2}])
    row = _row(priced_nozzles, DAY, 8)
    assert (row.petrol_price, row.diesel_price) == (120, 0)


def test_saving_twice_replaces_instead_of_appending(priced_nozzles):
    entry = [{"nozzle_id": 1, "opening": 100, "closing": 150}]
    save_readings_for_date(priced_nozzles, DAY, entry)
    first = _row(priced_nozzles, DAY, 1)
    first_values = (first.sales_litres, first.sales_value, first.petrol_price)

    save_readings_for_date(priced_nozzles, DAY, entry)

    rows = priced_nozzles.query(SalesReading).filter_by(date=DAY, nozzle_id=1).all()
    assert len(rows) == 1
    priced_nozzles.refresh(rows[0])
    assert (rows[0].sales_litres, rows[0].sales_value, rows[0].petrol_price) == first_values


@pytest.mark.parametrize(
    "opening, closing, fragment",
    [
        (10, 0, "Closing reading is required"),
        (10, 5, "must be equal to or greater"),
        (-1, 5, "cannot be negative"),
    ],
)
def test_invalid_readings_are_rejected(priced_nozzles, opening, closing, fragment):
    with pytest.raises(ValidationFailed) as exc:
        save_readings_for_date(
            priced_nozzles, DAY, [{"nozzle_id": 1, "opening": opening, "closing": closing}]
        )
    assert any(fragment in msg for msg in exc.value.errors)
    assert ledger_store.list_sales_by_date(priced_nozzles, DAY) == []


def test_empty_cell_with_zero_price_is_valid(db_session):
    # nozzles are seeded at price 0
    save_readings_for_date(db_session, DAY, [{"nozzle_id": 8, "opening": 0, "closing": 0}])
    row = _row(db_session, DAY, 8)
    assert (row.sales_litres, row.sales_value) == (0, 0)


def test_readings_without_price_are_rejected(db_session):
    with pytest.raises(ValidationFailed) as exc:
        save_readings_for_date(db_session, DAY, [{"nozzle_id": 1, "opening": 1, "closing": 2}])
    assert any("Unit price is required" in m for m in exc.value.errors)


def test_every_error_is_reported_and_nothing_saved(priced_nozzles):
    with pytest.raises(ValidationFailed) as exc:
        save_readings_for_date(priced_nozzles, DAY, [
            {"nozzle_id": 1, "opening": 10, "closing": 0},
            {"nozzle_id": 2, "opening": 100, "closing": 150},
            {"nozzle_id": 4, "opening": 10, "closing": 5},
        ])
    assert len(exc.value.errors) == 2
    assert exc.value.errors[0].startswith("Nozzle 1:")
    assert exc.value.errors[1].startswith("Nozzle 4:")
    assert ledger_store.list_sales_by_date(priced_nozzles, DAY) == []


def test_live_price_change_does_not_revalue_saved_readings(priced_nozzles):
    db = priced_nozzles
    entry = [{"nozzle_id": 1, "opening": 100, "closing": 150}]
    save_readings_for_date(db, DAY, entry)

    ledger_store.upsert_nozzle(db, 1, {"price_per_litre": 100})
    save_readings_for_date(db, DAY, entry)

    row = _row(db, DAY, 1)
    db.refresh(row)
    assert row.petrol_price == 95.5
    assert row.sales_value == pytest.approx(4775.0)

    report = report_data.sales_report(db, resolve_period("month", month="2024-01"))
    assert report["rows"][0]["unit_price"] == 95.5


def test_price_edit_needs_edit_mode(priced_nozzles):
    db = priced_nozzles
    save_readings_for_date(db, DAY, [{"nozzle_id": 1, "opening": 100, "closing": 150}])

    with pytest.raises(ValidationFailed):
        save_readings_for_date(db, DAY, [{"nozzle_id": 1, "unit_price": 100}])

    save_readings_for_date(db, DAY, [{"nozzle_id": 1, "unit_price": 100}], edit_mode=True)
    row = _row(db, DAY, 1)
    db.refresh(row)
    assert (row.opening, row.closing) == (100, 150)
    assert row.sales_value == pytest.approx(5000)


def test_default_openings_prefer_previous_day(priced_nozzles):
    db = priced_nozzles
    save_readings_for_date(db, "2024-01-01", [
        {"nozzle_id": 1, "opening": 100, "closing": 150},
        {"nozzle_id": 4, "opening": 10, "closing": 20},
    ])
    save_readings_for_date(db, "2024-01-02", [{"nozzle_id": 1, "opening": 150, "closing": 170}])

    defaults = default_openings(db, "2024-01-03")
    assert defaults[1] == {"closing": 170, "date": "2024-01-02", "source": PREVIOUS_DAY}
    assert defaults[4] == {"closing": 20, "date": "2024-01-01", "source": LAST_AVAILABLE}
    assert 2 not in defaults


def test_day_sheet_states(priced_nozzles):
    db = priced_nozzles
    save_readings_for_date(db, DAY, [{"nozzle_id": 1, "opening": 100, "closing": 150}])

    sheet = day_sheet(db, DAY)
    assert sheet["is_historical"]
    cells = {n.id: c for n, c in sheet["cells"]}
    assert isinstance(cells[1], HistoricalCell)
    assert isinstance(cells[2], EmptyCell)
    assert sheet["totals"]["value"] == pytest.approx(4775.0)
    assert sheet["totals"]["by_fuel"]["petrol"]["litres"] == 50

    nxt = day_sheet(db, "2024-01-02")
    assert not nxt["is_historical"]
    cells = {n.id: c for n, c in nxt["cells"]}
    assert cells[1].default_opening == 150


def test_cell_transitions(priced_nozzles):
    nozzle = ledger_store.get_nozzle(priced_nozzles, 1)

    fresh = enter_reading(open_cell(nozzle), 100, 150, nozzle.price_per_litre)
    assert isinstance(fresh, FreshCell)
    assert cell_totals(fresh) == (50, pytest.approx(4775.0))

    save_readings_for_date(priced_nozzles, DAY, [{"nozzle_id": 1, "opening": 100, "closing": 150}])
    hist = open_cell(nozzle, _row(priced_nozzles, DAY, 1))
    editing = apply_edit(begin_edit(hist), closing=160, price=100)
    assert isinstance(editing, EditingCell)
    assert cell_totals(editing) == (60, pytest.approx(6000))
    assert cancel_edit(editing) is hist

    with pytest.raises(ValueError):
        enter_reading(hist, 1, 2, 95.5)
    with pytest.raises(ValueError):
        begin_edit(fresh)


def test_cell_with_no_price_contributes_nothing():
    cell = FreshCell(nozzle_id=1, opening=1, closing=5, live_price=0)
    assert cell_totals(cell) == (0, 0)
    assert validate_cell("Nozzle 1", cell)


def test_unknown_nozzle_is_skipped(priced_nozzles):
    rows = save_readings_for_date(priced_nozzles, DAY, [
        {"nozzle_id": 99, "opening": 1, "closing": 2},
        {"nozzle_id": 1, "opening": 100, "closing": 150},
    ])
    assert [r.nozzle_id for r in rows] == [1]


def test_schema_drift_is_detected_and_repaired(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'old.db'}")
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE sales_readings (id INTEGER PRIMARY KEY, date TEXT, nozzle_id INTEGER, "
            "opening REAL, closing REAL, sales_litres REAL, sales_value REAL, "
            "UNIQUE(date, nozzle_id))"
        ))

    with Session(bind=engine) as db:
        with pytest.raises(SchemaDriftError):
            ensure_sales_schema(db)

    migrate(engine)
    assert missing_sales_columns(engine) == []
    with Session(bind=engine) as db:
        ensure_sales_schema(db)
    engine.dispose()


def test_saved_readings_are_locked_outside_edit_mode(priced_nozzles):
    db = priced_nozzles
    save_readings_for_date(db, DAY, [{"nozzle_id": 1, "opening": 100, "closing": 150}])

    with pytest.raises(ValidationFailed) as exc:
        save_readings_for_date(db, DAY, [{"nozzle_id": 1, "opening": 100, "closing": 900}])
    assert exc.value.errors == ["Nozzle 1: Enable edit mode to change a saved reading"]

    row = _row(db, DAY, 1)
    db.refresh(row)
    assert (row.opening, row.closing) == (100, 150)
    assert row.sales_value == pytest.approx(4775.0)

    save_readings_for_date(db, DAY, [{"nozzle_id": 1, "opening": 100, "closing": 900}], edit_mode=True)
    row = _row(db, DAY, 1)
    db.refresh(row)
    assert row.closing == 900
    assert row.sales_value == pytest.approx(800 * 95.5)


def test_new_nozzle_on_saved_date_needs_no_edit_mode(priced_nozzles):
    db = priced_nozzles
    save_readings_for_date(db, DAY, [{"nozzle_id": 1, "opening": 100, "closing": 150}])
    save_readings_for_date(db, DAY, [
        {"nozzle_id": 1, "opening": 100, "closing": 150},
        {"nozzle_id": 4, "opening": 10, "closing": 20},
    ])
    assert [r.nozzle_id for r in ledger_store.list_sales_by_date(db, DAY)] == [1, 4]


def test_reading_for_missing_nozzle_violates_foreign_key(db_session):
    row = {
        "nozzle_id": 99, "opening": 0, "closing": 0, "sales_litres": 0,
        "sales_value": 0, "petrol_price": 0, "diesel_price": 0,
    }
    with pytest.raises(IntegrityError):
        ledger_store.upsert_sales_readings(db_session, DAY, [row])
    assert ledger_store.list_sales_by_date(db_session, DAY) == []
