"""Request-scoped dependencies for authentication and role checks."""
from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..models.user import User, UserRole
from ..services import auth as auth_service

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def _user_from_credentials(
    credentials: HTTPAuthorizationCredentials | None,
    session: AsyncSession,
) -> User | None:
    if credentials is None or not credentials.credentials:
        return None
    user = await auth_service.resolve_token(session, credentials.credentials)
    # close the read transaction so handlers can open their own
    await session.commit()
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> User:
    user = await _user_from_credentials(credentials, session)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> User | None:
    """Public reads degrade to anonymous access when the token is missing or stale."""

    user = await _user_from_credentials(credentials, session)
    if user is None and credentials is not None:
        logger.warning("Ignoring invalid bearer token on public read")
    return user


def require_roles(*roles: UserRole):
    """Build a dependency admitting only users holding one of ``roles``."""

    async def _dependency(user: User = Depends(get_current_user)) -> User:
        if auth_service.normalise_role(user.role) not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return _dependency


require_admin = require_roles(UserRole.ADMIN)
require_author = require_roles(UserRole.ADMIN, UserRole.AGENT)
