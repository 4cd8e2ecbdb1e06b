"""Development project endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..models.user import User
from ..schemas import common as common_schema
from ..schemas import projects as projects_schema
from ..services import projects as projects_service
from .deps import require_admin

router = APIRouter()


@router.get("", response_model=list[projects_schema.ProjectOut])
async def list_projects(session: AsyncSession = Depends(get_session)) -> list[projects_schema.ProjectOut]:
    return await projects_service.list_projects(session)


@router.get("/mine", response_model=list[projects_schema.ProjectOut])
async def my_projects(
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> list[projects_schema.ProjectOut]:
    return await projects_service.list_projects(session, created_by=admin.uid)


@router.get("/{term}", response_model=projects_schema.ProjectOut)
async def get_project(term: str, session: AsyncSession = Depends(get_session)) -> projects_schema.ProjectOut:
    """Fetch a project by project ID (``P1000``) or opaque ID."""

    return await projects_service.get_project(term, session)


@router.post("", response_model=projects_schema.ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: projects_schema.ProjectCreate,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> projects_schema.ProjectOut:
    return await projects_service.create_project(payload, admin, session)


@router.patch("/{project_id}", response_model=projects_schema.ProjectOut)
async def update_project(
    project_id: str,
    payload: projects_schema.ProjectUpdate,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> projects_schema.ProjectOut:
    return await projects_service.update_project(project_id, payload, admin, session)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await projects_service.delete_project(project_id, admin, session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{project_id}/images", response_model=projects_schema.ProjectOut)
async def set_images(
    project_id: str,
    files: list[UploadFile] = File(...),
    cover_index: int | None = Form(default=None, ge=0),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> projects_schema.ProjectOut:
    return await projects_service.set_project_images(project_id, files, cover_index, admin, session)


@router.post("/{project_id}/uploads", response_model=common_schema.UploadResponse)
async def upload_images(
    project_id: str,
    files: list[UploadFile] = File(...),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> common_schema.UploadResponse:
    urls = await projects_service.upload_project_images(project_id, files, session)
    return common_schema.UploadResponse(urls=urls)
