# run_server.py
"""Launcher for the packaged desktop build (also works as `python run_server.py`)."""
import faulthandler
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path

# crash log lives next to the exe so it survives a console that closes
BASE_DIR = Path(sys.executable).resolve().parent if getattr(sys, "frozen", False) else Path(__file__).resolve().parent
CRASH_LOG = BASE_DIR / "ledger_crash.log"


def record(*lines: str):
    with open(CRASH_LOG, "a", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")


def serve():
    import uvicorn

    from fuel_ledger.core.config import API_HOST, API_PORT, DATABASE_URL, LOG_FILE, LOG_LEVEL
    from fuel_ledger.core.logging_config import configure_logging

    configure_logging()
    record(f"db={DATABASE_URL}", f"log_file={LOG_FILE}", f"listen={API_HOST}:{API_PORT}")

    # app import pulls in the engine, so it comes after the settings are logged
    from main import app

    # log_config=None: uvicorn logs through the handlers configured above
    uvicorn.run(app, host=API_HOST, port=API_PORT, reload=False, log_level=LOG_LEVEL.lower(), log_config=None)


def main() -> int:
    faulthandler.enable(open(CRASH_LOG, "a", encoding="utf-8"))
    record(
        f"--- start {datetime.now().isoformat(timespec='seconds')} ---",
        f"exe={sys.executable}",
        f"cwd={os.getcwd()}",
        f"base_dir={BASE_DIR}",
    )

    try:
        serve()
    except Exception:
        err = traceback.format_exc()
        record(err)
        print(err)
        if getattr(sys, "frozen", False):
            input("\nPress Enter to exit...")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
