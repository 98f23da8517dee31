import logging
from logging.handlers import RotatingFileHandler

from fuel_ledger.core.config import LOG_FILE, LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str = LOG_LEVEL, log_file=LOG_FILE) -> None:
    """Console + rotating file logging. Safe to call more than once."""
    global _configured
    if _configured:
        return

    root = logging.getLogger()
    root.setLevel(level)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(console)

    try:
        file_handler = RotatingFileHandler(
            log_file, maxBytes=1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)
    except OSError:
        # read-only install dir: keep console logging only
        logging.getLogger(__name__).warning("Cannot open log file %s", log_file)

    _configured = True
