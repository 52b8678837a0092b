from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
import logging

from salonbook.core.config import settings

logger = logging.getLogger(__name__)

# Tokens are minted by the external identity provider; tokenUrl only feeds the docs UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/v1/token")

CLIENT_ROLE = "client"
PARTNER_ROLE = "partner"

def create_access_token(
    data: Dict[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
        
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM
    )
    
    return encoded_jwt

async def get_current_user(token: str = Depends(oauth2_scheme)) -> Dict[str, Any]:
    """Get current user from token.

    Token shape: { sub: <user id>, role: "client" | "partner", email: ... }.
    A missing role is treated as a client.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except JWTError as jwt_error:
        logger.info(f"JWT decode error: {jwt_error}")
        raise credentials_exception
    
    subject: Optional[str] = payload.get("sub")
    if not subject:
        raise credentials_exception
    
    role = payload.get("role") or CLIENT_ROLE
    if role not in (CLIENT_ROLE, PARTNER_ROLE):
        raise credentials_exception
    
    return {
        "_id": str(subject),
        "role": role,
        "email": payload.get("email"),
    }

async def get_current_partner(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> Dict[str, Any]:
    """Require a salon partner account."""
    if current_user["role"] != PARTNER_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Salon partner account required"
        )
    return current_user
