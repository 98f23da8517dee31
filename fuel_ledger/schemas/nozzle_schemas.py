# fuel_ledger/schemas/nozzle_schemas.py

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class FuelType(str, Enum):
    PETROL = "petrol"
    DIESEL = "diesel"
    OTHERS = "others"


class NozzleUpdate(BaseModel):
    label: Optional[str] = None
    fuel_type: Optional[FuelType] = None
    price_per_litre: Optional[float] = None

    class Config:
        extra = "forbid"
        use_enum_values = True


class NozzleOut(BaseModel):
    id: int
    label: str
    fuel_type: str
    price_per_litre: float

    class Config:
        from_attributes = True
