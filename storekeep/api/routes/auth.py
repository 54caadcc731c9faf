"""
Authentication Endpoints
Operator login and identity
"""
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status

from storekeep.core.config import settings
from storekeep.core.security import create_access_token
from storekeep.dependencies import get_current_operator
from storekeep.schemas.auth import OperatorLogin, TokenResponse
from storekeep.services.auth_service import authenticate_operator

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
def login(credentials: OperatorLogin):
    """Login and get an access token"""
    email = authenticate_operator(credentials.email, credentials.password)
    if not email:
        logger.warning(f"Failed login for {credentials.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        data={"sub": email},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    logger.info(f"Operator {email} logged in")
    return {"access_token": access_token, "token_type": "bearer", "email": email}


@router.get("/me")
def me(operator: str = Depends(get_current_operator)):
    """Get current operator"""
    return {"email": operator}
