"""Schemas for accounts, sessions and profiles."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models.user import UserRole

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SignUpRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)
    display_name: str = Field(min_length=1)


class SignInRequest(BaseModel):
    email: str
    password: str


class PasswordResetRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)


class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str = Field(min_length=6)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uid: str
    email: str
    display_name: str
    role: UserRole
    created_at: datetime | None = None
    profile_image_url: str | None = None
    phone: str | None = None
    whatsapp: str | None = None
    bio: str | None = None
    company: str | None = None
    experience: str | None = None
    specialties: list[str] = Field(default_factory=list)


class PublicProfile(BaseModel):
    """Profile fields visible to anyone, e.g. on an agent's page."""

    model_config = ConfigDict(from_attributes=True)

    uid: str
    display_name: str
    role: UserRole
    profile_image_url: str | None = None
    phone: str | None = None
    whatsapp: str | None = None
    bio: str | None = None
    company: str | None = None
    experience: str | None = None
    specialties: list[str] = Field(default_factory=list)


class AuthResponse(BaseModel):
    token: str
    expires_at: datetime
    user: UserOut


class ProfileUpdate(BaseModel):
    display_name: str | None = None
    phone: str | None = None
    whatsapp: str | None = None
    bio: str | None = None
    company: str | None = None
    experience: str | None = None
    specialties: list[str] | None = None
    profile_image_url: str | None = None


class RoleUpdate(BaseModel):
    role: UserRole
