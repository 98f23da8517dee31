# fuel_ledger/models/nozzle_model.py
from sqlalchemy import Column, Integer, String, Float, CheckConstraint

from fuel_ledger.utils.database import Base

FUEL_TYPES = ("petrol", "diesel", "others")


class Nozzle(Base):
    __tablename__ = "nozzles"
    __table_args__ = (
        CheckConstraint("fuel_type IN ('petrol','diesel','others')", name="ck_nozzles_fuel_type"),
    )

    # pre-seeded 1..8, ids are stable
    id = Column(Integer, primary_key=True, autoincrement=False)
    label = Column(String, nullable=False)
    fuel_type = Column(String, nullable=False)

    # today's live price; historical readings keep their own snapshot
    price_per_litre = Column(Float, nullable=False, default=0, server_default="0")

    def __repr__(self) -> str:
        return f"<Nozzle(id={self.id}, label={self.label}, fuel={self.fuel_type})>"
