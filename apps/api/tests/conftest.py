"""Shared fixtures: an in-memory SQLite database and a throwaway media store."""
from __future__ import annotations

import io
import os
import tempfile
from datetime import datetime, timedelta, timezone
from uuid import uuid4

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["MEDIA_ROOT"] = tempfile.mkdtemp(prefix="manzil-media-")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from starlette.datastructures import Headers, UploadFile

from manzil.models import AuthToken, User
from manzil.schemas.listings import ListingCreate
from manzil.models.base import Base
from manzil.models.user import TokenPurpose, UserRole
from manzil.services import media
from manzil.services.media import LocalMediaStore


@pytest_asyncio.fixture
async def db():
    """Session factory bound to a fresh in-memory database."""

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest.fixture
def call(db):
    """Run a service function on its own session, as each request would."""

    async def _call(func, *args, **kwargs):
        async with db() as session:
            return await func(*args, session=session, **kwargs)

    return _call


@pytest.fixture(autouse=True)
def media_store(tmp_path):
    store = LocalMediaStore(root=tmp_path / "media", base_url="/media")
    media.set_media_store(store)
    yield store
    media.set_media_store(None)


@pytest.fixture
def make_user(db):
    async def _make(role: UserRole = UserRole.USER, *, email: str | None = None, with_token: bool = False):
        uid = str(uuid4())
        now = datetime.now(timezone.utc)
        user = User(
            uid=uid,
            email=email or f"{uid[:8]}@example.com",
            display_name=f"{role.value.title()} {uid[:4]}",
            role=role,
            # unusable hash, these accounts never sign in with a password
            password_hash="!",
            created_at=now,
            specialties=[],
        )
        token = None
        async with db() as session:
            async with session.begin():
                session.add(user)
                if with_token:
                    token = AuthToken(
                        token=f"token-{uid}",
                        uid=uid,
                        purpose=TokenPurpose.SESSION,
                        created_at=now,
                        expires_at=now + timedelta(hours=1),
                    )
                    session.add(token)
        return (user, token.token) if with_token else user

    return _make


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN)


@pytest_asyncio.fixture
async def agent(make_user):
    return await make_user(UserRole.AGENT)


def image_file(name: str = "photo.jpg", data: bytes = b"\xff\xd8\xff-jpeg", content_type: str = "image/jpeg") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=name, headers=Headers({"content-type": content_type}))


@pytest.fixture
def make_image():
    return image_file


def build_listing(**overrides):
    data = {
        "title": "3 Bedroom House",
        "description": "Quiet street near the park.",
        "price": 1500,
        "property_type": "rent",
        "location": {"address": "Street 7", "city": "Kabul", "district": "District 4"},
    }
    data.update(overrides)
    return ListingCreate(**data)


@pytest.fixture
def listing_payload():
    return build_listing
