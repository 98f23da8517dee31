# fuel_ledger/routers/data_management_router.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fuel_ledger.core.errors import LedgerError
from fuel_ledger.routers.deps import http_error
from fuel_ledger.schemas.backup_schemas import BackupOut
from fuel_ledger.services import backup_service
from fuel_ledger.utils.database import get_db

router = APIRouter(prefix="/data", tags=["Data Management"])


@router.post("/backup", response_model=BackupOut)
def backup_database(db: Session = Depends(get_db)):
    """Copy the database file into the backup folder (BACKUP_DIR)."""
    try:
        meta = backup_service.create_backup(db)
    except LedgerError as e:
        raise http_error(e)
    return {"success": True, **meta}
