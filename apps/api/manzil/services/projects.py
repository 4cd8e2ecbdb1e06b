"""Development projects, managed by admins."""
from __future__ import annotations

import logging
from typing import Any, Sequence
from uuid import uuid4

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.project import Project, ProjectStatus
from ..models.user import User
from ..repositories import projects as projects_repo
from ..schemas import projects as schemas
from . import media, sequence

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = frozenset(
    {
        "name",
        "description",
        "developer",
        "developed_by",
        "location",
        "status",
        "project_types",
        "features",
        "development_updates",
        "payment_plans",
        "floor_plans",
    }
)

_PROJECT_FIELDS = frozenset(
    {
        "name",
        "description",
        "developer",
        "developed_by",
        "marketed_by",
        "location",
        "project_types",
        "price_range",
        "price_in_dollar_range",
        "features",
        "development_updates",
        "payment_plans",
        "floor_plans",
        "walkthrough_3d_url",
        "contact_phone",
        "contact_whatsapp",
        "contact_email",
        "status",
    }
)


def _apply(project: Project, changes: dict[str, Any]) -> None:
    for name, value in changes.items():
        if name not in _PROJECT_FIELDS:
            continue
        if value is None and name in _REQUIRED_FIELDS:
            continue
        if name == "status":
            value = ProjectStatus(value)
        setattr(project, name, value)


async def _get_or_404(session: AsyncSession, project_id: str, *, for_update: bool = False) -> Project:
    project = await projects_repo.get_by_id(session, project_id, for_update=for_update)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


async def create_project(payload: schemas.ProjectCreate, admin: User, session: AsyncSession) -> schemas.ProjectOut:
    now = utcnow()
    async with session.begin():
        project = Project(
            id=str(uuid4()),
            project_id=await sequence.next_project_id(session),
            image_urls=[],
            project_types=[],
            features={},
            development_updates=[],
            payment_plans=[],
            floor_plans=[],
            created_by=admin.uid,
            created_at=now,
            updated_at=now,
        )
        _apply(project, payload.model_dump(mode="json"))
        session.add(project)
        await session.flush()

    logger.info("Project %s (%s) created by %s", project.id, project.project_id, admin.uid)
    return schemas.ProjectOut.model_validate(project)


async def update_project(
    project_id: str,
    payload: schemas.ProjectUpdate,
    admin: User,
    session: AsyncSession,
) -> schemas.ProjectOut:
    changes = payload.model_dump(exclude_unset=True, exclude={"images"}, mode="json")
    if payload.images is not None:
        selection = payload.images
        media.check_image_budget(len(selection.existing), len(selection.uploaded))
        media.check_image_ownership([*selection.existing, *selection.uploaded], f"projects/{project_id}")
        changes["image_urls"] = media.merge_with_cover(
            selection.existing,
            selection.uploaded,
            existing_cover_index=selection.existing_cover_index,
            uploaded_cover_index=selection.uploaded_cover_index,
        )

    async with session.begin():
        project = await _get_or_404(session, project_id, for_update=True)
        _apply(project, changes)
        if "image_urls" in changes:
            project.image_urls = changes["image_urls"]
        project.updated_at = utcnow()

    logger.info("Project %s updated by %s: %s", project_id, admin.uid, sorted(changes))
    return schemas.ProjectOut.model_validate(project)


async def delete_project(project_id: str, admin: User, session: AsyncSession) -> None:
    async with session.begin():
        project = await _get_or_404(session, project_id, for_update=True)
        images = [url for url in project.image_urls or [] if media.in_folder(url, f"projects/{project_id}")]
        await session.delete(project)

    logger.info("Project %s deleted by %s", project_id, admin.uid)
    if images:
        try:
            await media.delete_images(images)
        except media.StorageError:
            logger.warning("Could not remove images of project %s", project_id, exc_info=True)


async def set_project_images(
    project_id: str,
    files: Sequence[UploadFile],
    cover_index: int | None,
    admin: User,
    session: AsyncSession,
) -> schemas.ProjectOut:
    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="At least one image is required")
    media.check_image_budget(0, len(files))
    await _get_or_404(session, project_id)
    await session.commit()

    ordered = media.move_cover_to_front(files, cover_index)
    urls = await media.upload_images(ordered, f"projects/{project_id}")

    async with session.begin():
        project = await _get_or_404(session, project_id, for_update=True)
        project.image_urls = urls
        project.updated_at = utcnow()

    logger.info("Project %s now has %d images by %s", project_id, len(urls), admin.uid)
    return schemas.ProjectOut.model_validate(project)


async def upload_project_images(project_id: str, files: Sequence[UploadFile], session: AsyncSession) -> list[str]:
    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="At least one image is required")
    media.check_image_budget(0, len(files))
    await _get_or_404(session, project_id)
    await session.commit()
    return await media.upload_images(files, f"projects/{project_id}")


async def list_projects(session: AsyncSession, *, created_by: str | None = None) -> list[schemas.ProjectOut]:
    projects = await projects_repo.list_projects(session, created_by=created_by)
    return [schemas.ProjectOut.model_validate(item) for item in projects]


async def get_project(term: str, session: AsyncSession) -> schemas.ProjectOut:
    """Fetch by ``P1000`` style project ID or by opaque ID."""

    term = term.strip()
    project: Project | None = None
    if sequence.PROJECT_ID_PATTERN.match(term.upper()):
        project = await projects_repo.get_by_project_id(session, term.upper())
    if project is None:
        project = await projects_repo.get_by_id(session, term)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return schemas.ProjectOut.model_validate(project)
