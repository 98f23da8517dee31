# fuel_ledger/schemas/sales_schemas.py

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel


class ReadingEntry(BaseModel):
    nozzle_id: int
    opening: Optional[float] = None
    closing: Optional[float] = None
    # only honoured for already-saved readings in edit mode
    unit_price: Optional[float] = None

    class Config:
        extra = "forbid"


class SalesSaveRequest(BaseModel):
    date: dt.date
    entries: List[ReadingEntry]
    edit_mode: bool = False

    class Config:
        extra = "forbid"


class SalesReadingOut(BaseModel):
    id: int
    date: str
    nozzle_id: int
    opening: float
    closing: float
    sales_litres: float
    sales_value: float
    petrol_price: float
    diesel_price: float

    class Config:
        from_attributes = True


class SalesReadingJoinedOut(SalesReadingOut):
    label: str
    fuel_type: str


class DefaultOpeningOut(BaseModel):
    nozzle_id: int
    closing: float
    date: str
    source: str


class DayCellOut(BaseModel):
    nozzle_id: int
    label: str
    fuel_type: str
    state: str
    opening: Optional[float] = None
    closing: Optional[float] = None
    unit_price: float
    sales_litres: float
    sales_value: float
    default_opening: Optional[float] = None
    default_source: Optional[str] = None


class FuelBucketOut(BaseModel):
    litres: float
    value: float


class DayTotalsOut(BaseModel):
    litres: float
    value: float
    by_fuel: dict[str, FuelBucketOut]


class DaySheetOut(BaseModel):
    date: str
    is_historical: bool
    cells: List[DayCellOut]
    totals: DayTotalsOut
