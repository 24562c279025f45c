# marketplace/core/security.py
"""Bearer-token verification and role checks.

Tokens are issued by the external identity provider; this service only
verifies them. ``sub`` carries the member's user id.
"""
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .database import get_db
from .exceptions import AuthenticationError, PermissionDeniedError
from ..models.profile import UserRole

bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_ROLE = "admin"


class CurrentUser(BaseModel):
    id: UUID
    email: Optional[str] = None


def decode_access_token(token: str) -> dict:
    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError:
        raise AuthenticationError()


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> CurrentUser:
    """Dependency resolving the member behind the Authorization header."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    payload = decode_access_token(credentials.credentials)
    subject = payload.get("sub")
    if subject is None:
        raise AuthenticationError()
    try:
        user_id = UUID(str(subject))
    except ValueError:
        raise AuthenticationError()

    return CurrentUser(id=user_id, email=payload.get("email"))


async def get_optional_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> Optional[CurrentUser]:
    """Like get_current_user, but anonymous callers get None. A bad token is still a 401."""
    if credentials is None or not credentials.credentials:
        return None
    return await get_current_user(credentials)


async def has_role(db: AsyncSession, user_id: UUID, role: str) -> bool:
    stmt = select(UserRole.id).where(UserRole.user_id == user_id, UserRole.role == role)
    result = await db.execute(stmt)
    return result.first() is not None


async def get_current_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CurrentUser:
    """Dependency to get the current user and verify they hold the admin role."""
    if not await has_role(db, current_user.id, ADMIN_ROLE):
        raise PermissionDeniedError("Insufficient permissions. Admin access required.")
    return current_user
