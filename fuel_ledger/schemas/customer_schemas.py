# fuel_ledger/schemas/customer_schemas.py

from pydantic import BaseModel
from typing import Optional


class CustomerBase(BaseModel):
    name: str
    phone: Optional[str] = ""
    email: Optional[str] = ""
    notes: Optional[str] = ""

    class Config:
        extra = "forbid"


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        extra = "forbid"


class CustomerOut(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None

    class Config:
        from_attributes = True


# ---------- balances ----------

class CustomerTotalsOut(BaseModel):
    total_credit: float
    total_payment: float
    total_due: float

    class Config:
        from_attributes = True


class CustomerPeriodSummaryOut(BaseModel):
    customer_id: int
    opening_balance: float
    period_credit: float
    period_payment: float
    closing_balance: float
    totals: CustomerTotalsOut

    class Config:
        from_attributes = True


class CustomerSummaryRowOut(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    opening: float
    period_credit: float
    period_payment: float
    closing: float

    class Config:
        from_attributes = True
