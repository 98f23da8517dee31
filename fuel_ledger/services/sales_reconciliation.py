"""
Daily nozzle readings: one cell per (date, nozzle).

Cell states
-----------
EmptyCell       no reading stored for the date yet; carries the advisory
                opening (previous closing)
FreshCell       being entered for a new date; priced from the nozzle's live
                price_per_litre
HistoricalCell  a stored reading; read-only, priced by its frozen snapshot
EditingCell     a stored reading opened for editing; edits (readings and the
                frozen price) stay pending until saved, cancel_edit returns
                the untouched HistoricalCell

Transitions
-----------
open_cell      nozzle + stored row?         -> EmptyCell | HistoricalCell
enter_reading  EmptyCell | FreshCell        -> FreshCell
begin_edit     HistoricalCell               -> EditingCell
apply_edit     EditingCell                  -> EditingCell
cancel_edit    EditingCell                  -> HistoricalCell

Saving never touches a nozzle's live price: historical rows keep their own
price snapshot in the petrol_price / diesel_price slots.
"""
import logging
from dataclasses import dataclass, replace
from typing import Optional, Union

from sqlalchemy import text
from sqlalchemy.orm import Session

from fuel_ledger.core.errors import ValidationFailed
from fuel_ledger.migrations import ensure_sales_schema
from fuel_ledger.models import Nozzle, SalesReading
from fuel_ledger.services import ledger_store
from fuel_ledger.utils.calculations import num, reading_totals, snapshot_price, price_columns
from fuel_ledger.utils.period import previous_day

logger = logging.getLogger(__name__)

PREVIOUS_DAY = "previous_day"
LAST_AVAILABLE = "last_available"


@dataclass(frozen=True)
class EmptyCell:
    nozzle_id: int
    default_opening: Optional[float] = None
    default_source: Optional[str] = None


@dataclass(frozen=True)
class FreshCell:
    nozzle_id: int
    opening: float
    closing: float
    live_price: float


@dataclass(frozen=True)
class HistoricalCell:
    nozzle_id: int
    opening: float
    closing: float
    sales_litres: float
    sales_value: float
    frozen_price: float


@dataclass(frozen=True)
class EditingCell:
    nozzle_id: int
    original: HistoricalCell
    opening: float
    closing: float
    frozen_price: float


Cell = Union[EmptyCell, FreshCell, HistoricalCell, EditingCell]


# -------------------------------------------------
# Transitions
# -------------------------------------------------
def open_cell(
        nozzle: Nozzle,
        reading: Optional[SalesReading] = None,
        default: Optional[dict] = None,
) -> Cell:
    if reading is None:
        default = default or {}
        return EmptyCell(
            nozzle_id=nozzle.id,
            default_opening=default.get("closing"),
            default_source=default.get("source"),
        )
    return HistoricalCell(
        nozzle_id=nozzle.id,
        opening=num(reading.opening),
        closing=num(reading.closing),
        sales_litres=num(reading.sales_litres),
        sales_value=num(reading.sales_value),
        frozen_price=snapshot_price(nozzle.fuel_type, reading.petrol_price, reading.diesel_price),
    )


def enter_reading(cell: Cell, opening, closing, live_price) -> FreshCell:
    if not isinstance(cell, (EmptyCell, FreshCell)):
        raise ValueError(f"Cannot enter fresh readings on a {type(cell).__name__}")
    return FreshCell(
        nozzle_id=cell.nozzle_id,
        opening=num(opening),
        closing=num(closing),
        live_price=num(live_price),
    )


def begin_edit(cell: Cell) -> EditingCell:
    if not isinstance(cell, HistoricalCell):
        raise ValueError(f"Only stored readings can be edited, got {type(cell).__name__}")
    return EditingCell(
        nozzle_id=cell.nozzle_id,
        original=cell,
        opening=cell.opening,
        closing=cell.closing,
        frozen_price=cell.frozen_price,
    )


def apply_edit(cell: EditingCell, opening=None, closing=None, price=None) -> EditingCell:
    if not isinstance(cell, EditingCell):
        raise ValueError("Edits require a cell in edit mode")
    changes = {}
    if opening is not None:
        changes["opening"] = num(opening)
    if closing is not None:
        changes["closing"] = num(closing)
    if price is not None:
        changes["frozen_price"] = num(price)
    return replace(cell, **changes)


def cancel_edit(cell: EditingCell) -> HistoricalCell:
    if not isinstance(cell, EditingCell):
        raise ValueError("Cell is not in edit mode")
    return cell.original


# -------------------------------------------------
# Derived figures, one code path for every state
# -------------------------------------------------
def cell_price(cell: Cell) -> float:
    if isinstance(cell, FreshCell):
        return cell.live_price
    if isinstance(cell, (HistoricalCell, EditingCell)):
        return cell.frozen_price
    return 0.0


def cell_readings(cell: Cell) -> tuple[float, float]:
    if isinstance(cell, EmptyCell):
        return 0.0, 0.0
    return cell.opening, cell.closing


def cell_totals(cell: Cell) -> tuple[float, float]:
    """(litres, value) the cell contributes to the day's totals."""
    if isinstance(cell, EmptyCell):
        return 0.0, 0.0
    if isinstance(cell, HistoricalCell):
        return cell.sales_litres, cell.sales_value

    opening, closing = cell_readings(cell)
    litres, value = reading_totals(opening, closing, cell_price(cell))
    if litres <= 0 or cell_price(cell) <= 0:
        return 0.0, 0.0
    return litres, value


def validate_cell(label: str, cell: Cell) -> list[str]:
    """Every rule a cell breaks, as user-facing messages."""
    if isinstance(cell, (EmptyCell, HistoricalCell)):
        return []

    errors = []
    opening, closing = cell_readings(cell)

    if opening < 0 or closing < 0:
        errors.append(f"{label}: Meter readings cannot be negative")

    if opening > 0 and closing == 0:
        errors.append(f"{label}: Closing reading is required when opening reading is {opening:g}")

    if opening > 0 and closing > 0 and closing < opening:
        errors.append(
            f"{label}: Closing reading ({closing:g}) must be equal to or greater "
            f"than opening reading ({opening:g})"
        )

    if (opening > 0 or closing > 0) and cell_price(cell) <= 0:
        errors.append(f"{label}: Unit price is required when there are opening or closing readings")

    return errors


def cell_to_row(cell: Cell, fuel_type: str) -> dict:
    """Row for the upsert; derived fields always recomputed here."""
    opening, closing = cell_readings(cell)
    price = cell_price(cell)
    litres, value = reading_totals(opening, closing, price)
    return {
        "nozzle_id": cell.nozzle_id,
        "opening": opening,
        "closing": closing,
        "sales_litres": litres,
        "sales_value": value,
        **price_columns(fuel_type, price),
    }


CELL_STATES = {
    EmptyCell: "empty",
    FreshCell: "fresh",
    HistoricalCell: "historical",
    EditingCell: "editing",
}


def cell_view(nozzle: Nozzle, cell: Cell) -> dict:
    litres, value = cell_totals(cell)
    view = {
        "nozzle_id": nozzle.id,
        "label": nozzle.label,
        "fuel_type": nozzle.fuel_type,
        "state": CELL_STATES[type(cell)],
        "opening": None,
        "closing": None,
        "unit_price": cell_price(cell),
        "sales_litres": litres,
        "sales_value": value,
        "default_opening": None,
        "default_source": None,
    }
    if isinstance(cell, EmptyCell):
        # an empty cell will be priced live once readings are entered
        view["unit_price"] = num(nozzle.price_per_litre)
        view["default_opening"] = cell.default_opening
        view["default_source"] = cell.default_source
    else:
        view["opening"], view["closing"] = cell_readings(cell)
    return view


# -------------------------------------------------
# Store-backed operations
# -------------------------------------------------
def default_openings(db: Session, day: str) -> dict[int, dict]:
    """
    Advisory opening reading per nozzle for a date without readings.

    Prefer the previous calendar day's closing; otherwise the latest closing
    strictly before `day`.
    """
    result: dict[int, dict] = {}

    prev = previous_day(day)
    for r in db.execute(
            text("select nozzle_id, closing, date from sales_readings where date = :d order by nozzle_id"),
            {"d": prev},
    ).mappings():
        result[r["nozzle_id"]] = {"closing": num(r["closing"]), "date": r["date"], "source": PREVIOUS_DAY}

    latest = db.execute(
        text(
            """
            select sr.nozzle_id, sr.closing, sr.date
            from sales_readings sr
                     join (select nozzle_id, max(date) as max_date
                           from sales_readings
                           where date < :d
                           group by nozzle_id) latest
                          on sr.nozzle_id = latest.nozzle_id and sr.date = latest.max_date
            order by sr.nozzle_id
            """
        ),
        {"d": day},
    ).mappings()
    for r in latest:
        if r["nozzle_id"] not in result:
            result[r["nozzle_id"]] = {"closing": num(r["closing"]), "date": r["date"], "source": LAST_AVAILABLE}

    return result


def day_cells(db: Session, day: str) -> list[tuple[Nozzle, Cell]]:
    nozzles = ledger_store.list_nozzles(db)
    stored = {r.nozzle_id: r for r in ledger_store.list_sales_by_date(db, day)}
    defaults = {} if stored else default_openings(db, day)
    return [(n, open_cell(n, stored.get(n.id), defaults.get(n.id))) for n in nozzles]


def summarize_cells(pairs: list[tuple[Nozzle, Cell]]) -> dict:
    by_fuel = {ft: {"litres": 0.0, "value": 0.0} for ft in ("petrol", "diesel", "others")}
    litres_total = 0.0
    value_total = 0.0
    for nozzle, cell in pairs:
        litres, value = cell_totals(cell)
        litres_total += litres
        value_total += value
        bucket = by_fuel.setdefault(nozzle.fuel_type, {"litres": 0.0, "value": 0.0})
        bucket["litres"] += litres
        bucket["value"] += value
    return {"litres": litres_total, "value": value_total, "by_fuel": by_fuel}


def day_sheet(db: Session, day: str) -> dict:
    pairs = day_cells(db, day)
    historical = any(isinstance(c, HistoricalCell) for _, c in pairs)
    return {
        "date": day,
        "is_historical": historical,
        "cells": pairs,
        "totals": summarize_cells(pairs),
    }


def build_cells(
        db: Session,
        day: str,
        entries: list[dict],
        edit_mode: bool = False,
) -> list[tuple[Nozzle, Cell]]:
    """
    Turn submitted entries into Fresh / Editing cells for `day`.

    Nozzles without a stored row are priced live. Stored rows are read-only
    unless edit_mode is on: outside it an entry may only repeat the saved
    readings, and the frozen price (entry["unit_price"]) cannot change.
    """
    nozzles = {n.id: n for n in ledger_store.list_nozzles(db)}
    stored = {r.nozzle_id: r for r in ledger_store.list_sales_by_date(db, day)}

    pairs = []
    errors = []
    for e in entries:
        nozzle = nozzles.get(e["nozzle_id"])
        if nozzle is None:
            logger.warning("Skipping reading for unknown nozzle %s on %s", e["nozzle_id"], day)
            continue

        reading = stored.get(nozzle.id)
        if reading is None:
            cell = enter_reading(
                open_cell(nozzle), e.get("opening"), e.get("closing"), nozzle.price_per_litre
            )
        else:
            saved = begin_edit(open_cell(nozzle, reading))
            cell = apply_edit(
                saved, opening=e.get("opening"), closing=e.get("closing"), price=e.get("unit_price")
            )
            if not edit_mode:
                if (cell.opening, cell.closing) != (saved.opening, saved.closing):
                    errors.append(f"{nozzle.label}: Enable edit mode to change a saved reading")
                if cell.frozen_price != saved.frozen_price:
                    errors.append(f"{nozzle.label}: Enable edit mode to change the price of a saved reading")
        pairs.append((nozzle, cell))

    if errors:
        raise ValidationFailed(errors)
    return pairs


def save_readings_for_date(
        db: Session,
        day: str,
        entries: list[dict],
        edit_mode: bool = False,
) -> list[SalesReading]:
    ensure_sales_schema(db)

    pairs = build_cells(db, day, entries, edit_mode=edit_mode)

    errors = []
    for nozzle, cell in pairs:
        errors.extend(validate_cell(nozzle.label, cell))
    if errors:
        logger.warning("Rejected sales save for %s: %s", day, "; ".join(errors))
        raise ValidationFailed(errors)

    rows = [cell_to_row(cell, nozzle.fuel_type) for nozzle, cell in pairs]
    ledger_store.upsert_sales_readings(db, day, rows)
    return ledger_store.list_sales_by_date(db, day)
