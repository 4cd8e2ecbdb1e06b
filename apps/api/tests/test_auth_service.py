"""Accounts, bearer tokens and password resets."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException

from manzil.core.security import hash_password, verify_password
from manzil.models import AuthToken
from manzil.models.user import TokenPurpose, UserRole
from manzil.repositories import users as users_repo
from manzil.schemas import users as schemas
from manzil.services import auth as auth_service


def test_password_hash_round_trip():
    encoded = hash_password("s3cret!", salt="fixed")

    assert encoded.startswith("pbkdf2_sha256$")
    assert verify_password("s3cret!", encoded)
    assert not verify_password("wrong", encoded)
    assert not verify_password("s3cret!", "!")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("Admin", UserRole.ADMIN), (" agent ", UserRole.AGENT), ("owner", UserRole.USER), (None, UserRole.USER)],
)
def test_normalise_role(raw, expected):
    assert auth_service.normalise_role(raw) is expected


@pytest.mark.asyncio
async def test_sign_up_creates_user_and_session(db, call):
    response = await call(
        auth_service.sign_up,
        schemas.SignUpRequest(email="Nadia@Example.com", password="secret1", display_name=" Nadia "),
    )

    assert response.user.email == "nadia@example.com"
    assert response.user.display_name == "Nadia"
    assert response.user.role is UserRole.USER
    async with db() as session:
        user = await auth_service.resolve_token(session, response.token)
    assert user.uid == response.user.uid


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(call):
    payload = schemas.SignUpRequest(email="dup@example.com", password="secret1", display_name="Dup")
    await call(auth_service.sign_up, payload)

    with pytest.raises(HTTPException) as exc:
        await call(auth_service.sign_up, payload)

    assert exc.value.status_code == 409


@pytest.mark.asyncio
async def test_sign_in_with_wrong_password(call):
    await call(
        auth_service.sign_up,
        schemas.SignUpRequest(email="omar@example.com", password="secret1", display_name="Omar"),
    )

    signed_in = await call(auth_service.sign_in, schemas.SignInRequest(email="OMAR@example.com", password="secret1"))
    assert signed_in.user.email == "omar@example.com"

    with pytest.raises(HTTPException) as exc:
        await call(auth_service.sign_in, schemas.SignInRequest(email="omar@example.com", password="nope"))
    assert exc.value.status_code == 401
    assert exc.value.detail == "Invalid email or password"

    with pytest.raises(HTTPException) as exc:
        await call(auth_service.sign_in, schemas.SignInRequest(email="ghost@example.com", password="secret1"))
    assert exc.value.detail == "Invalid email or password"


@pytest.mark.asyncio
async def test_sign_out_revokes_token(db, call, make_user):
    user, token = await make_user(UserRole.AGENT, with_token=True)

    await call(auth_service.sign_out, token)

    async with db() as session:
        assert await auth_service.resolve_token(session, token) is None


@pytest.mark.asyncio
async def test_expired_token_is_rejected(db, make_user):
    user = await make_user()
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    async with db() as session:
        async with session.begin():
            session.add(
                AuthToken(
                    token="stale",
                    uid=user.uid,
                    purpose=TokenPurpose.SESSION,
                    created_at=past,
                    expires_at=past + timedelta(hours=1),
                )
            )

    async with db() as session:
        assert await auth_service.resolve_token(session, "stale") is None


@pytest.mark.asyncio
async def test_password_reset_flow(db, call):
    await call(
        auth_service.sign_up,
        schemas.SignUpRequest(email="reset@example.com", password="oldpass", display_name="Reset"),
    )

    token = await call(auth_service.request_password_reset, schemas.PasswordResetRequest(email="reset@example.com"))
    assert token

    await call(
        auth_service.confirm_password_reset,
        schemas.PasswordResetConfirm(token=token, new_password="newpass"),
    )

    signed_in = await call(auth_service.sign_in, schemas.SignInRequest(email="reset@example.com", password="newpass"))
    assert signed_in.user.email == "reset@example.com"
    async with db() as session:
        assert await users_repo.get_token(session, token, TokenPurpose.PASSWORD_RESET) is None

    with pytest.raises(HTTPException) as exc:
        await call(
            auth_service.confirm_password_reset,
            schemas.PasswordResetConfirm(token=token, new_password="another"),
        )
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_password_reset_for_unknown_email(call):
    token = await call(auth_service.request_password_reset, schemas.PasswordResetRequest(email="nobody@example.com"))

    assert token is None


@pytest.mark.asyncio
async def test_reset_token_is_not_logged_at_info(call, caplog):
    await call(
        auth_service.sign_up,
        schemas.SignUpRequest(email="quiet@example.com", password="secret", display_name="Quiet"),
    )

    with caplog.at_level(logging.INFO, logger="manzil.services.auth"):
        token = await call(auth_service.request_password_reset, schemas.PasswordResetRequest(email="quiet@example.com"))

    assert "Password reset token issued" in caplog.text
    assert token not in caplog.text
