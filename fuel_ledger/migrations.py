"""
Schema creation and in-place upgrades for the SQLite store.

Older stores may predate the per-reading price snapshot columns; they are
added on startup. The sales write path re-checks them before every save and
refuses to write (instead of silently valuing sales at 0) if they are still
missing.
"""
import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

import fuel_ledger.models  # noqa: F401  ensure models are registered
from fuel_ledger.core.errors import SchemaDriftError
from fuel_ledger.utils.database import Base

logger = logging.getLogger(__name__)

SALES_PRICE_COLUMNS = ("petrol_price", "diesel_price")


def _column_names(bind, table: str) -> set[str]:
    insp = inspect(bind)
    if not insp.has_table(table):
        return set()
    return {c["name"] for c in insp.get_columns(table)}


def missing_sales_columns(bind) -> list[str]:
    cols = _column_names(bind, "sales_readings")
    return [c for c in SALES_PRICE_COLUMNS if c not in cols]


def ensure_sales_schema(db: Session) -> None:
    missing = missing_sales_columns(db.get_bind())
    if missing:
        logger.error("sales_readings is missing columns: %s", ", ".join(missing))
        raise SchemaDriftError(
            "Database is missing required columns "
            f"({', '.join(missing)}) in sales_readings. Restart the application "
            "to run the schema upgrade, or restore a recent backup."
        )


def migrate(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)

    missing = missing_sales_columns(engine)
    if missing:
        with engine.begin() as conn:
            for col in missing:
                logger.info("Adding sales_readings.%s", col)
                conn.execute(text(f"ALTER TABLE sales_readings ADD COLUMN {col} REAL NOT NULL DEFAULT 0"))

    # the expenses table once carried a separate category column
    if "category" in _column_names(engine, "expenses"):
        logger.info("Dropping legacy expenses.category column")
        with engine.begin() as conn:
            conn.execute(text("ALTER TABLE expenses DROP COLUMN category"))
