# fuel_ledger/models/customer_model.py
from sqlalchemy import Column, Integer, String, Text, text

from fuel_ledger.utils.database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # SQLite datetime('now') text
    created_at = Column(String, server_default=text("(datetime('now'))"))

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name={self.name})>"
