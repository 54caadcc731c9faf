"""
Operator authentication
Checks dashboard login credentials against Supabase Auth when the Supabase
backend is enabled, otherwise against the configured operator account.
"""
import logging
from typing import Optional

from storekeep.core.config import settings
from storekeep.core.security import verify_password

logger = logging.getLogger(__name__)


def _supabase_sign_in(email: str, password: str) -> bool:
    from storekeep.dependencies import _supabase

    try:
        response = _supabase().client.auth.sign_in_with_password({
            "email": email,
            "password": password,
        })
        return getattr(response, "user", None) is not None
    except Exception as e:
        logger.warning(f"Supabase sign-in failed for {email}: {e}")
        return False


def authenticate_operator(email: str, password: str) -> Optional[str]:
    """Return the operator email on success, None otherwise"""
    if settings.supabase_enabled:
        return email if _supabase_sign_in(email, password) else None

    if email.lower() != settings.OPERATOR_EMAIL.lower():
        return None
    if not verify_password(password, settings.OPERATOR_PASSWORD_HASH):
        return None
    return settings.OPERATOR_EMAIL
