# fuel_ledger/models/expense_model.py
from sqlalchemy import Column, Integer, String, Text, Float, Index, text

from fuel_ledger.utils.database import Base


class Expense(Base):
    __tablename__ = "expenses"
    __table_args__ = (Index("idx_expenses_date", "date"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(String, nullable=False)  # YYYY-MM-DD

    # free text, doubles as the report category
    description = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)

    created_at = Column(String, server_default=text("(datetime('now'))"))

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, date={self.date}, amount={self.amount})>"
