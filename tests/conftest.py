import os
import pathlib
import sys
import tempfile

import pytest


REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.append(str(REPO_ROOT))


def pytest_configure():
    if os.getenv("DATABASE_URL"):
        return
    temp_dir = tempfile.mkdtemp(prefix="fuel-ledger-tests-")
    db_path = pathlib.Path(temp_dir) / "pytest.db"
    os.environ["DATABASE_URL"] = f"sqlite:///{db_path}"


@pytest.fixture(scope="session")
def sqlite_engine():
    from fuel_ledger.migrations import migrate
    from fuel_ledger.utils.database import Base, engine

    Base.metadata.drop_all(bind=engine)
    migrate(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session(sqlite_engine):
    """Fresh tables for every test, with the default nozzles seeded."""
    from fuel_ledger.initial_data import seed_nozzles
    from fuel_ledger.utils.database import Base, SessionLocal

    with sqlite_engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())

    session = SessionLocal()
    seed_nozzles(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def api_client(sqlite_engine, db_session):
    from fastapi.testclient import TestClient
    from fuel_ledger.utils.database import get_db
    from main import app

    def _get_test_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_test_db
    client = TestClient(app)
    try:
        yield client
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def priced_nozzles(db_session):
    """Live prices: petrol 95.5, diesel 90, others 120."""
    from fuel_ledger.services import ledger_store

    for nid in (1, 2, 3):
        ledger_store.upsert_nozzle(db_session, nid, {"price_per_litre": 95.5})
    for nid in (4, 5, 6, 7):
        ledger_store.upsert_nozzle(db_session, nid, {"price_per_litre": 90})
    ledger_store.upsert_nozzle(db_session, 8, {"price_per_litre": 120})
    return db_session


@pytest.fixture()
def customer_a(db_session):
    """Credit 1000 on 2024-01-05, payment 400 on 2024-01-20."""
    from fuel_ledger.services import ledger_store

    customer = ledger_store.create_customer(db_session, {"name": "A", "phone": "9000000001"})
    ledger_store.add_transaction(
        db_session, {"customer_id": customer.id, "amount": 1000, "type": "credit", "date": "2024-01-05"}
    )
    ledger_store.add_transaction(
        db_session, {"customer_id": customer.id, "amount": 400, "type": "payment", "date": "2024-01-20"}
    )
    return customer
