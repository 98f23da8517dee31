# fuel_ledger/schemas/transaction_schemas.py

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class TransactionType(str, Enum):
    CREDIT = "credit"
    PAYMENT = "payment"


class TransactionCreate(BaseModel):
    amount: float
    type: TransactionType
    date: dt.date
    note: Optional[str] = None

    class Config:
        extra = "forbid"
        use_enum_values = True


class TransactionOut(BaseModel):
    id: int
    customer_id: int
    amount: float
    type: str
    date: str
    note: Optional[str] = None
    created_at: Optional[str] = None

    class Config:
        from_attributes = True
