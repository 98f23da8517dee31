import logging

from sqlalchemy.orm import Session

from fuel_ledger.models import Nozzle
from fuel_ledger.utils.database import SessionLocal

logger = logging.getLogger(__name__)

DEFAULT_NOZZLES = [
    {"id": 1, "label": "Nozzle 1", "fuel_type": "petrol"},
    {"id": 2, "label": "Nozzle 2", "fuel_type": "petrol"},
    {"id": 3, "label": "Nozzle 3", "fuel_type": "petrol"},
    {"id": 4, "label": "Nozzle 4", "fuel_type": "diesel"},
    {"id": 5, "label": "Nozzle 5", "fuel_type": "diesel"},
    {"id": 6, "label": "Nozzle 6", "fuel_type": "diesel"},
    {"id": 7, "label": "Nozzle 7", "fuel_type": "diesel"},
    {"id": 8, "label": "Others", "fuel_type": "others"},
]


def seed_nozzles(db: Session) -> int:
    if db.query(Nozzle).count() > 0:
        return 0
    for n in DEFAULT_NOZZLES:
        db.add(Nozzle(price_per_litre=0, **n))
    db.commit()
    logger.info("Seeded %d default nozzles", len(DEFAULT_NOZZLES))
    return len(DEFAULT_NOZZLES)


def init_seed():
    db = SessionLocal()
    try:
        seed_nozzles(db)
    finally:
        db.close()
