# fuel_ledger/models/sales_reading_model.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, UniqueConstraint, Index, text

from fuel_ledger.utils.database import Base


class SalesReading(Base):
    __tablename__ = "sales_readings"
    __table_args__ = (
        UniqueConstraint("date", "nozzle_id"),
        Index("idx_sales_readings_date", "date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(String, nullable=False)  # YYYY-MM-DD
    nozzle_id = Column(Integer, ForeignKey("nozzles.id"), nullable=False)

    opening = Column(Float, nullable=False)
    closing = Column(Float, nullable=False)

    # derived at save time, never trusted from input
    sales_litres = Column(Float, nullable=False)
    sales_value = Column(Float, nullable=False)

    # price snapshot slots: petrol_price is the primary slot (petrol + others),
    # diesel_price the secondary slot
    petrol_price = Column(Float, nullable=False, default=0, server_default="0")
    diesel_price = Column(Float, nullable=False, default=0, server_default="0")

    created_at = Column(String, server_default=text("(datetime('now'))"))
