"""
Plant-owner authentication for the care calendar routes.

Owners sign in with Supabase; the app sends the session's access token
as a Bearer header. The token is checked against Supabase Auth, and the
same token scopes the owner's database client so row-level security
limits every care query to their own tasks.
"""

import logging

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel

from verdant.db.adapter import DatabaseAdapter
from verdant.db.client import get_authenticated_client, get_service_client

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AuthenticatedUser(BaseModel):
    """The signed-in plant owner."""
    id: str
    email: str | None
    access_token: str


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization header")
    if not authorization.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail="Invalid authorization format")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing access token")
    return token


async def get_current_user(authorization: str | None = Header(None)) -> AuthenticatedUser:
    """Resolve the plant owner behind a Supabase access token."""
    access_token = _bearer_token(authorization)

    try:
        user_response = get_service_client().auth.get_user(access_token)
    except Exception as e:
        logger.warning(f"Care calendar token rejected: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if not user_response or not user_response.user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return AuthenticatedUser(
        id=user_response.user.id,
        email=user_response.user.email,
        access_token=access_token,
    )


def get_user_db(user: AuthenticatedUser = Depends(get_current_user)) -> DatabaseAdapter:
    """The owner's RLS-scoped client. Care routes read and write through this."""
    return get_authenticated_client(user.access_token)
