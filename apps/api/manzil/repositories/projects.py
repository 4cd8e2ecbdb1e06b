"""Project persistence helpers."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.project import Project


async def get_by_id(session: AsyncSession, project_id: str, *, for_update: bool = False) -> Project | None:
    stmt = select(Project).where(Project.id == project_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_by_project_id(session: AsyncSession, project_id: str) -> Project | None:
    """Look up a project by its human-readable ``P1000`` style ID."""

    stmt = select(Project).where(Project.project_id == project_id).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_projects(session: AsyncSession, *, created_by: str | None = None) -> list[Project]:
    stmt = select(Project)
    if created_by is not None:
        stmt = stmt.where(Project.created_by == created_by)
    stmt = stmt.order_by(Project.created_at.desc(), Project.id.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())
