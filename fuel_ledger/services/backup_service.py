import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from fuel_ledger.core.config import BACKUP_DIR, database_file_path
from fuel_ledger.core.errors import BackupError
from fuel_ledger.services.ledger_store import TABLES, TABLE_MODELS, count_rows

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "slnfs_crm_backup_"


def backup_filename(ts: Optional[datetime] = None) -> str:
    ts = ts or datetime.now()
    return f"{BACKUP_PREFIX}{ts.strftime('%Y-%m-%dT%H-%M-%S')}.db"


def create_backup(
        db: Session,
        source_path: Optional[Path] = None,
        backup_dir: Optional[Path] = None,
) -> dict:
    """
    Copy the SQLite file byte-for-byte into the backup folder.

    Pending work in `db` is flushed to disk by the commit below before
    copying. Returns {timestamp, tables, record_counts, total_size, file_path}.
    """
    source = Path(source_path or database_file_path())
    target_dir = Path(backup_dir or BACKUP_DIR)

    if not source.exists():
        raise BackupError(f"Database file not found: {source}")

    db.commit()
    record_counts = {name: count_rows(db, TABLE_MODELS[name]) for name in TABLES}

    now = datetime.now()
    target = target_dir / backup_filename(now)

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
    except OSError as e:
        logger.error("Backup of %s to %s failed: %s", source, target, e)
        if target.exists():
            os.remove(target)
        raise BackupError(f"Backup failed: {e.strerror or e}")

    size = target.stat().st_size
    logger.info("Backup written to %s (%d bytes)", target, size)

    return {
        "timestamp": now.isoformat(timespec="seconds"),
        "tables": list(TABLES),
        "record_counts": record_counts,
        "total_size": size,
        "file_path": str(target),
    }
