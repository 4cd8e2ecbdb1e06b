"""User and token repository helpers."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import AuthToken, TokenPurpose, User, UserRole


async def get_by_uid(session: AsyncSession, uid: str, *, for_update: bool = False) -> User | None:
    stmt = select(User).where(User.uid == uid)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_by_email(session: AsyncSession, email: str) -> User | None:
    stmt = select(User).where(User.email == email.strip().lower())
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_users(session: AsyncSession) -> list[User]:
    stmt = select(User).order_by(User.created_at.desc(), User.uid.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_uids_with_role(session: AsyncSession, role: UserRole) -> list[str]:
    result = await session.execute(select(User.uid).where(User.role == role))
    return list(result.scalars().all())


async def get_token(session: AsyncSession, token: str, purpose: TokenPurpose) -> AuthToken | None:
    stmt = select(AuthToken).where(AuthToken.token == token, AuthToken.purpose == purpose)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def revoke_token(session: AsyncSession, token: str) -> None:
    await session.execute(delete(AuthToken).where(AuthToken.token == token))


async def revoke_tokens_for(session: AsyncSession, uid: str, purpose: TokenPurpose) -> None:
    await session.execute(delete(AuthToken).where(AuthToken.uid == uid, AuthToken.purpose == purpose))


async def purge_expired_tokens(session: AsyncSession, now: datetime) -> int:
    result = await session.execute(delete(AuthToken).where(AuthToken.expires_at < now))
    return result.rowcount or 0
