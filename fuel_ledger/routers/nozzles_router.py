# fuel_ledger/routers/nozzles_router.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fuel_ledger.core.errors import LedgerError
from fuel_ledger.routers.deps import http_error
from fuel_ledger.schemas.nozzle_schemas import NozzleOut, NozzleUpdate
from fuel_ledger.services import ledger_store
from fuel_ledger.utils.database import get_db

router = APIRouter(prefix="/nozzles", tags=["Nozzles"])


@router.get("", response_model=list[NozzleOut])
def list_nozzles(db: Session = Depends(get_db)):
    return ledger_store.list_nozzles(db)


@router.get("/{nozzle_id}", response_model=NozzleOut)
def get_nozzle(nozzle_id: int, db: Session = Depends(get_db)):
    nozzle = ledger_store.get_nozzle(db, nozzle_id)
    if not nozzle:
        raise HTTPException(404, "Nozzle not found")
    return nozzle


@router.put("/{nozzle_id}", response_model=NozzleOut)
def update_nozzle(nozzle_id: int, payload: NozzleUpdate, db: Session = Depends(get_db)):
    """Label, fuel type and live price. Saved readings keep their own price."""
    try:
        return ledger_store.upsert_nozzle(db, nozzle_id, payload.model_dump(exclude_unset=True))
    except LedgerError as e:
        raise http_error(e)
