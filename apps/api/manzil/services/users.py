"""Profiles and role management."""
from __future__ import annotations

import logging

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User
from ..repositories import users as users_repo
from ..schemas import users as schemas
from . import media

logger = logging.getLogger(__name__)


async def get_public_profile(uid: str, session: AsyncSession) -> schemas.PublicProfile:
    user = await users_repo.get_by_uid(session, uid)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return schemas.PublicProfile.model_validate(user)


async def update_profile(user: User, payload: schemas.ProfileUpdate, session: AsyncSession) -> schemas.UserOut:
    """Apply the provided profile fields; strings are trimmed and omitted fields kept."""

    changes = payload.model_dump(exclude_unset=True)
    updates: dict[str, object] = {}
    for key, value in changes.items():
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
        elif isinstance(value, list):
            value = [item.strip() for item in value if isinstance(item, str) and item.strip()]
        updates[key] = value

    if "display_name" in changes and not updates.get("display_name"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Display name cannot be empty")

    async with session.begin():
        record = await users_repo.get_by_uid(session, user.uid, for_update=True)
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        if not updates:
            logger.warning("Profile update for %s had no fields to change", user.uid)
        for key, value in updates.items():
            setattr(record, key, value)
        session.add(record)

    logger.info("Profile updated for %s: %s", user.uid, sorted(updates))
    return schemas.UserOut.model_validate(record)


async def set_profile_image(user: User, file: UploadFile, session: AsyncSession) -> schemas.UserOut:
    url = await media.upload_profile_image(file, user.uid)
    return await update_profile(user, schemas.ProfileUpdate(profile_image_url=url), session)


async def list_users(session: AsyncSession) -> list[schemas.UserOut]:
    users = await users_repo.list_users(session)
    return [schemas.UserOut.model_validate(item) for item in users]


async def change_role(
    actor: User,
    uid: str,
    payload: schemas.RoleUpdate,
    session: AsyncSession,
) -> schemas.UserOut:
    """Assign a new role to another user; admins cannot change their own."""

    if uid == actor.uid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot change your own role")

    async with session.begin():
        target = await users_repo.get_by_uid(session, uid, for_update=True)
        if target is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        previous = target.role
        if previous != payload.role:
            target.role = payload.role
            session.add(target)

    if previous != payload.role:
        logger.info("Role for %s changed from %s to %s by %s", uid, previous.value, payload.role.value, actor.uid)
    return schemas.UserOut.model_validate(target)
