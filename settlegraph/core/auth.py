from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from settlegraph.core.config import settings

security = HTTPBearer()


class CurrentUser(BaseModel):
    """Identity of the caller, as asserted by the token issuer."""
    username: str
    is_admin: bool = False


def create_access_token(
    username: str,
    is_admin: bool = False,
    expires_delta: timedelta | None = None
) -> str:
    """Create JWT access token."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)

    now = datetime.now(timezone.utc)
    expire = now + expires_delta

    payload = {
        "sub": username,
        "is_admin": is_admin,
        "exp": int(expire.timestamp()),
        "iat": int(now.timestamp())
    }

    return jwt.encode(
        payload,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM
    )


def decode_access_token(token: str) -> CurrentUser:
    """Decode a bearer token into the caller identity."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise credentials_exception

    username = (payload.get("sub") or "").strip()
    if not username:
        raise credentials_exception

    return CurrentUser(username=username, is_admin=bool(payload.get("is_admin", False)))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> CurrentUser:
    """Get current user from JWT token."""
    return decode_access_token(credentials.credentials)
