# fuel_ledger/models/transaction_model.py
from sqlalchemy import Column, Integer, String, Text, Float, ForeignKey, CheckConstraint, Index, text

from fuel_ledger.utils.database import Base

TRANSACTION_TYPES = ("credit", "payment")


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("type IN ('credit','payment')", name="ck_transactions_type"),
        Index("idx_transactions_customer_date", "customer_id", "date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)

    # always positive; the sign comes from `type`
    amount = Column(Float, nullable=False)
    type = Column(String, nullable=False)  # credit / payment

    date = Column(String, nullable=False)  # YYYY-MM-DD
    note = Column(Text, nullable=True)
    created_at = Column(String, server_default=text("(datetime('now'))"))

    def signed_amount(self) -> float:
        amt = float(self.amount or 0)
        return amt if self.type == "credit" else -amt
