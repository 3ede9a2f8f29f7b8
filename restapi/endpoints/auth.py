"""Resolution of the authenticated owner id for every protected endpoint."""

from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from components.core import exceptions
from components.core.security import owner_id_from_token

# Tokens are issued by the external identity provider; this service only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token", auto_error=False)


async def get_current_owner_id(token: Optional[str] = Depends(oauth2_scheme)) -> str:
    """Get the opaque owner id from the bearer token."""
    owner_id = owner_id_from_token(token)
    if owner_id is None:
        raise exceptions.UnauthenticatedError("Could not validate credentials")
    return owner_id
