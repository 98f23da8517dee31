# fuel_ledger/schemas/backup_schemas.py

from typing import Dict, List

from pydantic import BaseModel


class BackupOut(BaseModel):
    success: bool = True
    timestamp: str
    tables: List[str]
    record_counts: Dict[str, int]
    total_size: int
    file_path: str
