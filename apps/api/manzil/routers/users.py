"""Profile endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..models.user import User
from ..schemas import users as users_schema
from ..services import users as users_service
from .deps import get_current_user

router = APIRouter()


@router.patch("/me", response_model=users_schema.UserOut)
async def update_profile(
    payload: users_schema.ProfileUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> users_schema.UserOut:
    return await users_service.update_profile(user, payload, session)


@router.put("/me/photo", response_model=users_schema.UserOut)
async def upload_photo(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> users_schema.UserOut:
    return await users_service.set_profile_image(user, file, session)


@router.get("/{uid}", response_model=users_schema.PublicProfile)
async def public_profile(uid: str, session: AsyncSession = Depends(get_session)) -> users_schema.PublicProfile:
    return await users_service.get_public_profile(uid, session)
