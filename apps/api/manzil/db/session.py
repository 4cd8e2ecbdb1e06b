"""Database session management."""
from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ..core.config import settings

connect_args: dict[str, object] = {}
engine_kwargs: dict[str, object] = {}

if settings.database_async_url.startswith("sqlite"):
    connect_args["check_same_thread"] = False
    # in-memory databases only survive on a single shared connection
    engine_kwargs["poolclass"] = StaticPool
else:
    engine_kwargs["pool_pre_ping"] = True
    if settings.database_ssl_required:
        connect_args["ssl"] = True

engine = create_async_engine(
    settings.database_async_url,
    echo=False,
    connect_args=connect_args,
    **engine_kwargs,
)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency to provide an async session."""

    async with SessionLocal() as session:
        yield session
