"""
Error types raised by the workbook administration operations.
"""
from typing import Optional


class WorkbookAdminError(Exception):
    """Base class for errors reported back to the person running an operation."""
    pass


class PreconditionError(WorkbookAdminError):
    """
    A required sheet, folder or field is missing.

    Raised before anything is written, so the operation can simply be
    re-run once the workbook is fixed.
    """
    pass


class BatchOperationError(WorkbookAdminError):
    """A multi-request call was rejected as a whole by the Sheets API."""

    def __init__(self, message: str, request_count: int = 0, cause: Optional[Exception] = None):
        super().__init__(message)
        self.request_count = request_count
        self.cause = cause
