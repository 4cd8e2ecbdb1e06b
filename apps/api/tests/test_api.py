"""End-to-end HTTP flows through the FastAPI app."""
from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from manzil.db.session import get_session
from manzil.main import app
from manzil.models.user import UserRole
from manzil.services.media import StorageError

LISTING = {
    "title": "Shop on Main Road",
    "description": "Ground floor shop with a shutter front.",
    "price": 900,
    "property_type": "rent",
    "property_category": "shop",
    "location": {"address": "Main Road", "city": "Kabul", "district": "District 2", "latitude": 34.52, "longitude": 69.18},
}


@pytest_asyncio.fixture
async def client(db):
    async def _session():
        async with db() as session:
            yield session

    app.dependency_overrides[get_session] = _session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_agent_submission_is_published_after_approval(client, make_user):
    _, agent_token = await make_user(UserRole.AGENT, with_token=True)
    _, admin_token = await make_user(UserRole.ADMIN, with_token=True)

    created = await client.post("/api/listings", json=LISTING, headers=_auth(agent_token))
    assert created.status_code == 201
    listing = created.json()
    assert listing["property_id"] == "AM1000"
    assert listing["review_kind"] == "new"
    assert listing["map_links"]["embed_url"].startswith("https://www.openstreetmap.org/export/embed.html")

    public = await client.get("/api/listings")
    assert public.json() == []
    hidden = await client.get(f"/api/listings/{listing['property_id']}")
    assert hidden.status_code == 404

    queue = await client.get("/api/admin/approvals", headers=_auth(admin_token))
    assert [item["id"] for item in queue.json()["approvals"]] == [listing["id"]]

    approved = await client.post(f"/api/admin/approvals/{listing['id']}/approve", headers=_auth(admin_token))
    assert approved.status_code == 200
    assert approved.json()["action"] == "approved_new"

    public = await client.get("/api/listings", params={"category": "shop", "district": "all"})
    assert [item["id"] for item in public.json()] == [listing["id"]]
    detail = await client.get("/api/listings/am1000")
    assert detail.json()["status"] == "active"


@pytest.mark.asyncio
async def test_listing_writes_require_an_author(client, make_user):
    _, user_token = await make_user(UserRole.USER, with_token=True)

    anonymous = await client.post("/api/listings", json=LISTING)
    member = await client.post("/api/listings", json=LISTING, headers=_auth(user_token))

    assert anonymous.status_code == 401
    assert anonymous.headers["www-authenticate"] == "Bearer"
    assert member.status_code == 403


@pytest.mark.asyncio
async def test_invalid_listing_payload(client, make_user):
    _, admin_token = await make_user(UserRole.ADMIN, with_token=True)
    payload = {**LISTING, "location": {"address": "Main Road", "city": "Kabul"}}

    response = await client.post("/api/listings", json=payload, headers=_auth(admin_token))

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_public_read_ignores_invalid_token(client, make_user):
    _, admin_token = await make_user(UserRole.ADMIN, with_token=True)
    created = await client.post("/api/listings", json=LISTING, headers=_auth(admin_token))

    response = await client.get(f"/api/listings/{created.json()['id']}", headers=_auth("expired-token"))

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_review_routes_are_admin_only(client, make_user):
    _, agent_token = await make_user(UserRole.AGENT, with_token=True)

    queue = await client.get("/api/admin/approvals", headers=_auth(agent_token))
    unknown = await client.post("/api/admin/approvals/x/approve-everything", headers=_auth(agent_token))

    assert queue.status_code == 403
    assert unknown.status_code in (403, 422)


@pytest.mark.asyncio
async def test_image_upload_with_cover(client, make_user):
    _, agent_token = await make_user(UserRole.AGENT, with_token=True)
    listing = (await client.post("/api/listings", json=LISTING, headers=_auth(agent_token))).json()

    response = await client.put(
        f"/api/listings/{listing['id']}/images",
        files=[
            ("files", ("front.jpg", b"front", "image/jpeg")),
            ("files", ("back.jpg", b"back", "image/jpeg")),
        ],
        data={"cover_index": "1"},
        headers=_auth(agent_token),
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body["image_urls"]) == 2
    assert body["cover_image_url"] == body["image_urls"][0]


@pytest.mark.asyncio
async def test_storage_failure_maps_to_bad_gateway(client, make_user):
    _, admin_token = await make_user(UserRole.ADMIN, with_token=True)
    listing = (await client.post("/api/listings", json=LISTING, headers=_auth(admin_token))).json()

    with patch("manzil.services.listings.media.upload_images", AsyncMock(side_effect=StorageError("disk full"))):
        response = await client.put(
            f"/api/listings/{listing['id']}/images",
            files=[("files", ("front.jpg", b"front", "image/jpeg"))],
            headers=_auth(admin_token),
        )

    assert response.status_code == 502


@pytest.mark.asyncio
async def test_sign_up_then_profile(client):
    signed_up = await client.post(
        "/api/auth/signup",
        json={"email": "zahra@example.com", "password": "secret1", "display_name": "Zahra"},
    )
    assert signed_up.status_code == 201
    token = signed_up.json()["token"]

    me = await client.get("/api/auth/me", headers=_auth(token))
    updated = await client.patch("/api/users/me", json={"bio": "  Buyer  "}, headers=_auth(token))
    profile = await client.get(f"/api/users/{me.json()['uid']}")
    signed_out = await client.post("/api/auth/signout", headers=_auth(token))
    after = await client.get("/api/auth/me", headers=_auth(token))

    assert me.json()["role"] == "user"
    assert updated.json()["bio"] == "Buyer"
    assert profile.json()["display_name"] == "Zahra"
    assert "email" not in profile.json()
    assert signed_out.json() == {"status": "signed_out"}
    assert after.status_code == 401


@pytest.mark.asyncio
async def test_projects_are_admin_managed(client, make_user):
    _, admin_token = await make_user(UserRole.ADMIN, with_token=True)
    _, agent_token = await make_user(UserRole.AGENT, with_token=True)
    payload = {
        "name": "Green Valley",
        "developer": "Valley Builders",
        "developed_by": "Valley Builders",
        "location": {"address": "Airport Road", "city": "Kabul"},
    }

    forbidden = await client.post("/api/projects", json=payload, headers=_auth(agent_token))
    created = await client.post("/api/projects", json=payload, headers=_auth(admin_token))
    fetched = await client.get("/api/projects/P1000")
    deleted = await client.delete(f"/api/projects/{created.json()['id']}", headers=_auth(admin_token))

    assert forbidden.status_code == 403
    assert created.status_code == 201
    assert fetched.json()["name"] == "Green Valley"
    assert deleted.status_code == 204
    assert (await client.get("/api/projects")).json() == []
