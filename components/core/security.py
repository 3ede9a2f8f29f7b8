"""JWT helpers for resolving the opaque owner id of a request."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from components.core.config import get_settings


def create_access_token(owner_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed access token whose subject is the owner id."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": owner_id,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """Verify a JWT token and return its payload."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        return None


def owner_id_from_token(token: Optional[str]) -> Optional[str]:
    """Return the owner id carried by a valid token, or None."""
    if not token:
        return None
    payload = verify_token(token)
    if payload is None:
        return None
    subject = payload.get("sub")
    return str(subject) if subject else None
