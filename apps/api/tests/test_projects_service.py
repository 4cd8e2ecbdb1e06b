"""Development projects."""
from __future__ import annotations

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from manzil.models.project import ProjectStatus
from manzil.schemas import projects as schemas
from manzil.schemas.common import ImageSelection
from manzil.services import projects as projects_service


def _project(**overrides) -> schemas.ProjectCreate:
    data = {
        "name": " Kabul Heights ",
        "description": "Twin towers with parking.",
        "developer": "Heights Co",
        "developed_by": "Heights Co",
        "location": {"address": "Darulaman Road", "city": "Kabul", "district": "District 6", "latitude": 34.5, "longitude": 69.1},
        "project_types": [{"type": "apartment", "bedrooms": 2, "price_range": {"min": 100, "max": 200}}],
    }
    data.update(overrides)
    return schemas.ProjectCreate(**data)


@pytest.mark.asyncio
async def test_create_assigns_project_ids(call, admin):
    first = await call(projects_service.create_project, _project(), admin)
    second = await call(projects_service.create_project, _project(name="Second"), admin)

    assert (first.project_id, second.project_id) == ("P1000", "P1001")
    assert first.name == "Kabul Heights"
    assert first.status is ProjectStatus.UPCOMING
    assert first.project_types[0]["price_range"] == {"min": 100, "max": 200}
    assert first.map_links is not None


def test_price_range_must_be_ordered():
    with pytest.raises(ValidationError):
        _project(price_range={"min": 500, "max": 100})


@pytest.mark.asyncio
async def test_update_and_lookup(call, admin):
    created = await call(projects_service.create_project, _project(), admin)
    a, b = (f"/media/projects/{created.id}/{name}.jpg" for name in "ab")

    updated = await call(
        projects_service.update_project,
        created.id,
        schemas.ProjectUpdate(
            status="completed",
            images=ImageSelection(existing=[a, b], existing_cover_index=1),
        ),
        admin,
    )
    by_project_id = await call(projects_service.get_project, "p1000")

    assert updated.status is ProjectStatus.COMPLETED
    assert updated.image_urls == [b, a]
    assert by_project_id.id == created.id
    assert by_project_id.name == "Kabul Heights"


@pytest.mark.asyncio
async def test_set_project_images(call, admin, make_image, media_store):
    created = await call(projects_service.create_project, _project(), admin)

    updated = await call(
        projects_service.set_project_images,
        created.id,
        [make_image("a.jpg", b"a"), make_image("b.jpg", b"b")],
        1,
        admin,
    )

    first = media_store.path_from_url(updated.image_urls[0])
    assert first.startswith(f"projects/{created.id}/image_0_")
    assert (media_store.root / first).read_bytes() == b"b"


@pytest.mark.asyncio
async def test_list_and_delete(call, admin, make_user):
    other_admin = await make_user(admin.role)
    mine = await call(projects_service.create_project, _project(), admin)
    theirs = await call(projects_service.create_project, _project(name="Theirs"), other_admin)

    everything = await call(projects_service.list_projects)
    own = await call(projects_service.list_projects, created_by=admin.uid)

    assert {item.id for item in everything} == {mine.id, theirs.id}
    assert [item.id for item in own] == [mine.id]

    await call(projects_service.delete_project, mine.id, admin)
    with pytest.raises(HTTPException) as exc:
        await call(projects_service.get_project, mine.id)
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_project_images_stay_within_their_folder(call, admin, make_image, media_store):
    other = await call(projects_service.create_project, _project(name="Other"), admin)
    other = await call(projects_service.set_project_images, other.id, [make_image()], None, admin)
    other_path = media_store.root / media_store.path_from_url(other.image_urls[0])
    mine = await call(projects_service.create_project, _project(), admin)

    with pytest.raises(HTTPException) as exc:
        await call(
            projects_service.update_project,
            mine.id,
            schemas.ProjectUpdate(images=ImageSelection(existing=other.image_urls)),
            admin,
        )
    assert exc.value.status_code == 400

    await call(projects_service.delete_project, mine.id, admin)
    assert other_path.exists()
