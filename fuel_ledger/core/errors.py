"""
Domain errors raised by the services layer.

Routers translate these into HTTPException responses; services never
import FastAPI.
"""


class LedgerError(Exception):
    """Base class for every error the ledger services raise on purpose."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(LedgerError):
    """Input rejected before any mutation. Carries every violation found."""

    status_code = 400

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Validation failed")


class NotFoundError(LedgerError):
    status_code = 404


class SchemaDriftError(LedgerError):
    """The store is missing columns the write path depends on."""

    status_code = 500


class ReportWriteError(LedgerError):
    status_code = 500


class BackupError(LedgerError):
    status_code = 500
