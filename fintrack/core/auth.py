from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from fintrack.core.config import settings
from fintrack.core.errors import UnauthorizedError

security = HTTPBearer(auto_error=False)


def create_access_token(owner_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a bearer token for an owner (development and tests)."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    payload = {
        "sub": owner_id,
        "exp": int((now + expires_delta).timestamp()),
        "iat": int(now.timestamp())
    }
    if settings.FIREBASE_PROJECT_ID:
        payload["aud"] = settings.FIREBASE_PROJECT_ID

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> str:
    """Return the owner id carried by a valid token."""
    options = {"verify_aud": bool(settings.FIREBASE_PROJECT_ID)}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.FIREBASE_PROJECT_ID or None,
            options=options
        )
    except JWTError:
        raise UnauthorizedError("Invalid token")

    owner_id = payload.get("sub")
    if not owner_id:
        raise UnauthorizedError("Invalid token")
    return owner_id


async def get_current_owner(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """Owner id of the authenticated caller."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("No token provided")
    return verify_token(credentials.credentials)
