# fuel_ledger/schemas/expense_schemas.py

import datetime as dt
from typing import Optional

from pydantic import BaseModel


class ExpenseCreate(BaseModel):
    date: dt.date
    description: str
    amount: float

    class Config:
        extra = "forbid"


class ExpenseUpdate(BaseModel):
    date: Optional[dt.date] = None
    description: Optional[str] = None
    amount: Optional[float] = None

    class Config:
        extra = "forbid"


class ExpenseOut(BaseModel):
    id: int
    date: str
    description: str
    amount: float
    created_at: Optional[str] = None

    class Config:
        from_attributes = True
