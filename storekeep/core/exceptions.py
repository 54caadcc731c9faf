"""Rental ledger and storage exception classes"""
from typing import List, Optional

from fastapi import status


class LedgerError(Exception):
    """Base exception for StoreKeep domain and storage failures"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str = "Operation failed"):
        super().__init__(detail)
        self.detail = detail


class ValidationError(LedgerError):
    """Precondition violated before any write; safe to retry after correction"""
    pass


class NotFoundError(ValidationError):
    """Referenced record does not exist"""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail)


class ConflictError(ValidationError):
    """Record is in a state that forbids the operation (e.g. unit already rented)"""

    status_code = status.HTTP_409_CONFLICT


class PersistenceError(LedgerError):
    """Storage call failed; carries the backend-supplied message"""

    status_code = status.HTTP_502_BAD_GATEWAY


class InconsistencyError(PersistenceError):
    """A multi-step operation failed after some of its writes had been applied"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, completed_steps: Optional[List[str]] = None):
        super().__init__(detail)
        self.completed_steps = list(completed_steps or [])
