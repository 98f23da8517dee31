import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fuel_ledger.core.config import CORS_ORIGINS, STATION_NAME
from fuel_ledger.core.logging_config import configure_logging
from fuel_ledger.initial_data import init_seed
from fuel_ledger.migrations import migrate
from fuel_ledger.utils.database import engine

from fuel_ledger.routers import (
    customers_router,
    transactions_router,
    nozzles_router,
    sales_router,
    expenses_router,
    reports_router,
    dashboard_router,
    data_management_router,
)

logger = logging.getLogger("fuel_ledger")

app = FastAPI(title="Fuel Station Ledger API", version="1.0")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(customers_router.router)
app.include_router(transactions_router.router)
app.include_router(nozzles_router.router)
app.include_router(sales_router.router)
app.include_router(expenses_router.router)
app.include_router(reports_router.router)
app.include_router(dashboard_router.router)
app.include_router(data_management_router.router)


@app.on_event("startup")
def on_startup():
    configure_logging()

    logger.info("Running schema migration…")
    migrate(engine)

    logger.info("Seeding default nozzles…")
    init_seed()
    logger.info("Startup complete.")


@app.get("/")
def root():
    return {"message": f"{STATION_NAME} ledger is running", "status": "ok"}
