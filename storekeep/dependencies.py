import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from storekeep.core.config import settings
from storekeep.core.security import decode_access_token
from storekeep.database import SessionLocal, get_db
from storekeep.services.rental_ledger import RentalLedger
from storekeep.services.reporting_service import ReportingService
from storekeep.services.storage import SqlStorage, Storage, create_supabase_storage

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

_supabase_storage = None


def _supabase() -> Storage:
    global _supabase_storage
    if _supabase_storage is None:
        _supabase_storage = create_supabase_storage(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    return _supabase_storage


def get_storage(db: Session = Depends(get_db)) -> Storage:
    """Storage for the configured backend"""
    if settings.supabase_enabled:
        return _supabase()
    return SqlStorage(db)


@contextmanager
def storage_session() -> Iterator[Storage]:
    """Storage outside a request (background jobs)"""
    if settings.supabase_enabled:
        yield _supabase()
        return
    db = SessionLocal()
    try:
        yield SqlStorage(db)
    finally:
        db.close()


def get_ledger(storage: Storage = Depends(get_storage)) -> RentalLedger:
    return RentalLedger(storage)


def get_reporting(storage: Storage = Depends(get_storage)) -> ReportingService:
    return ReportingService(storage)


async def get_current_operator(token: str = Depends(oauth2_scheme)) -> str:
    """
    Email of the authenticated operator.
    Returns 401 if the token is missing, invalid or expired.
    """
    payload = decode_access_token(token)
    email = payload.get("sub") if payload else None
    if not email:
        logger.warning("Rejected request with invalid access token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return email
