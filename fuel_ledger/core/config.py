import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# ======================================================
# Base directory works for both:
# - normal dev run (uvicorn main:app)
# - frozen onefile EXE (run_server.exe)
# ======================================================
if getattr(sys, "frozen", False):
    BASE_DIR = Path(sys.executable).parent
else:
    # This file is: <project_root>/fuel_ledger/core/config.py
    BASE_DIR = Path(__file__).resolve().parents[2]

load_dotenv(dotenv_path=BASE_DIR / ".env")


def _csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


STATION_NAME = os.getenv("STATION_NAME", "Sri Lakshmi Narayana Filling station")

DATABASE_PATH = Path(os.getenv("DATABASE_PATH", str(BASE_DIR / "slnfs_crm.db")))
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{DATABASE_PATH}"

BACKUP_DIR = Path(
    os.getenv("BACKUP_DIR", str(Path.home() / "Downloads" / "SLNFS_CRM_Backups"))
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = Path(os.getenv("LOG_FILE", str(BASE_DIR / "backend.log")))

API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "5001"))

CORS_ORIGINS = _csv_env(
    "CORS_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,app://.",
)


def database_file_path() -> Path:
    """Filesystem path of the SQLite store (used by backups)."""
    if DATABASE_URL.startswith("sqlite:///"):
        return Path(DATABASE_URL[len("sqlite:///"):])
    return DATABASE_PATH
