"""Email/password accounts and bearer tokens."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.security import hash_password, new_token, verify_password
from ..models.user import AuthToken, TokenPurpose, User, UserRole
from ..repositories import users as users_repo
from ..schemas import users as schemas

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def _ensure_tz(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalise_role(role: UserRole | str | None) -> UserRole:
    """Map loosely formatted role strings onto ``UserRole``; unknown values become ``user``."""

    if isinstance(role, UserRole):
        return role
    try:
        return UserRole((role or "").strip().lower())
    except ValueError:
        return UserRole.USER


async def _issue_token(session: AsyncSession, user: User, purpose: TokenPurpose, ttl: timedelta) -> AuthToken:
    now = datetime.now(timezone.utc)
    token = AuthToken(token=new_token(), uid=user.uid, purpose=purpose, created_at=now, expires_at=now + ttl)
    session.add(token)
    await session.flush()
    return token


def _auth_response(user: User, token: AuthToken) -> schemas.AuthResponse:
    return schemas.AuthResponse(
        token=token.token,
        expires_at=token.expires_at,
        user=schemas.UserOut.model_validate(user),
    )


async def sign_up(payload: schemas.SignUpRequest, session: AsyncSession) -> schemas.AuthResponse:
    """Register an account with the default ``user`` role and sign it in."""

    email = payload.email.strip().lower()
    async with session.begin():
        if await users_repo.get_by_email(session, email) is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="An account with this email already exists")

        user = User(
            uid=str(uuid4()),
            email=email,
            display_name=payload.display_name.strip(),
            role=UserRole.USER,
            password_hash=hash_password(payload.password),
            created_at=datetime.now(timezone.utc),
            specialties=[],
        )
        session.add(user)
        await session.flush()
        token = await _issue_token(
            session, user, TokenPurpose.SESSION, timedelta(minutes=settings.token_ttl_minutes)
        )

    logger.info("User created: %s", user.uid)
    return _auth_response(user, token)


async def sign_in(payload: schemas.SignInRequest, session: AsyncSession) -> schemas.AuthResponse:
    async with session.begin():
        user = await users_repo.get_by_email(session, payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)
        purged = await users_repo.purge_expired_tokens(session, datetime.now(timezone.utc))
        if purged:
            logger.info("Purged %d expired tokens", purged)
        token = await _issue_token(
            session, user, TokenPurpose.SESSION, timedelta(minutes=settings.token_ttl_minutes)
        )

    logger.info("User signed in: %s", user.uid)
    return _auth_response(user, token)


async def sign_out(token: str, session: AsyncSession) -> None:
    async with session.begin():
        await users_repo.revoke_token(session, token)


async def resolve_token(session: AsyncSession, token: str) -> User | None:
    """Return the user owning a live session token, or None."""

    record = await users_repo.get_token(session, token, TokenPurpose.SESSION)
    if record is None:
        return None
    if _ensure_tz(record.expires_at) <= datetime.now(timezone.utc):
        return None
    return await users_repo.get_by_uid(session, record.uid)


async def request_password_reset(payload: schemas.PasswordResetRequest, session: AsyncSession) -> str | None:
    """Issue a reset token for the account, if one exists.

    No mail transport is wired in; the token is logged for the operator. The
    caller always gets the same response so account existence is not leaked.
    """

    async with session.begin():
        user = await users_repo.get_by_email(session, payload.email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return None
        await users_repo.revoke_tokens_for(session, user.uid, TokenPurpose.PASSWORD_RESET)
        token = await _issue_token(
            session, user, TokenPurpose.PASSWORD_RESET, timedelta(minutes=settings.password_reset_ttl_minutes)
        )

    logger.info("Password reset token issued for %s", user.uid)
    logger.debug("Password reset token for %s: %s", user.uid, token.token)
    return token.token


async def confirm_password_reset(payload: schemas.PasswordResetConfirm, session: AsyncSession) -> None:
    async with session.begin():
        record = await users_repo.get_token(session, payload.token, TokenPurpose.PASSWORD_RESET)
        if record is None or _ensure_tz(record.expires_at) <= datetime.now(timezone.utc):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Reset link is invalid or has expired")

        user = await users_repo.get_by_uid(session, record.uid, for_update=True)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        user.password_hash = hash_password(payload.new_password)
        session.add(user)
        await users_repo.revoke_tokens_for(session, user.uid, TokenPurpose.PASSWORD_RESET)
        # a new password signs out every existing session
        await users_repo.revoke_tokens_for(session, user.uid, TokenPurpose.SESSION)

    logger.info("Password reset completed for %s", user.uid)
