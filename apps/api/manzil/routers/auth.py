"""Sign-up, sign-in and password reset."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..models.user import User
from ..schemas import common as common_schema
from ..schemas import users as users_schema
from ..services import auth as auth_service
from .deps import bearer_scheme, get_current_user

router = APIRouter()


@router.post("/signup", response_model=users_schema.AuthResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(
    payload: users_schema.SignUpRequest,
    session: AsyncSession = Depends(get_session),
) -> users_schema.AuthResponse:
    return await auth_service.sign_up(payload, session)


@router.post("/signin", response_model=users_schema.AuthResponse)
async def sign_in(
    payload: users_schema.SignInRequest,
    session: AsyncSession = Depends(get_session),
) -> users_schema.AuthResponse:
    return await auth_service.sign_in(payload, session)


@router.post("/signout", response_model=common_schema.StatusResponse)
async def sign_out(
    user: User = Depends(get_current_user),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> common_schema.StatusResponse:
    if credentials is not None:
        await auth_service.sign_out(credentials.credentials, session)
    return common_schema.StatusResponse(status="signed_out")


@router.get("/me", response_model=users_schema.UserOut)
async def me(user: User = Depends(get_current_user)) -> users_schema.UserOut:
    return users_schema.UserOut.model_validate(user)


@router.post("/password-reset", response_model=common_schema.StatusResponse)
async def request_password_reset(
    payload: users_schema.PasswordResetRequest,
    session: AsyncSession = Depends(get_session),
) -> common_schema.StatusResponse:
    """Always answers the same way so account existence is not revealed."""

    await auth_service.request_password_reset(payload, session)
    return common_schema.StatusResponse(status="reset_requested")


@router.post("/password-reset/confirm", response_model=common_schema.StatusResponse)
async def confirm_password_reset(
    payload: users_schema.PasswordResetConfirm,
    session: AsyncSession = Depends(get_session),
) -> common_schema.StatusResponse:
    await auth_service.confirm_password_reset(payload, session)
    return common_schema.StatusResponse(status="password_reset")
