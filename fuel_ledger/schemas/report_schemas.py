# fuel_ledger/schemas/report_schemas.py

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class PeriodMode(str, Enum):
    ALL = "all"
    MONTH = "month"
    RANGE = "range"


class ReportFormat(str, Enum):
    CSV = "csv"
    PDF = "pdf"


class ReportPeriodIn(BaseModel):
    mode: PeriodMode = PeriodMode.ALL
    month: Optional[str] = None  # YYYY-MM
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None

    class Config:
        extra = "forbid"
        use_enum_values = True


class ExportRequest(ReportPeriodIn):
    # empty / missing = save dialog closed
    file_path: Optional[str] = None


class ExportResultOut(BaseModel):
    cancelled: bool
    file_path: Optional[str] = None


class DefaultFilenameOut(BaseModel):
    filename: str
