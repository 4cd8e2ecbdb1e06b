"""Cover ordering and the local media store."""
from __future__ import annotations

import logging

import pytest
from fastapi import HTTPException

from manzil.services import media
from manzil.services.media import StorageError


def test_cover_moves_to_front():
    assert media.move_cover_to_front(["A", "B", "C"], 2) == ["C", "A", "B"]


@pytest.mark.parametrize("index", [None, 0, 3, -1])
def test_cover_index_outside_range_keeps_order(index):
    assert media.move_cover_to_front(["A", "B", "C"], index) == ["A", "B", "C"]


def test_merge_prefers_uploaded_cover():
    merged = media.merge_with_cover(["A", "B"], ["C", "D"], existing_cover_index=1, uploaded_cover_index=1)

    assert merged == ["D", "A", "B", "C"]


def test_merge_uses_existing_cover_when_no_upload_chosen():
    assert media.merge_with_cover(["A", "B"], ["C"], existing_cover_index=1) == ["B", "A", "C"]
    assert media.merge_with_cover(["A"], ["C"], uploaded_cover_index=5) == ["A", "C"]


@pytest.mark.asyncio
async def test_local_store_round_trip(media_store):
    url = await media_store.save("listings/abc/image_0_1.jpg", b"data", "image/jpeg")

    assert url == "/media/listings/abc/image_0_1.jpg"
    assert media_store.path_from_url(f"https://cdn.example.com{url}?v=2") == "listings/abc/image_0_1.jpg"
    assert await media_store.delete("listings/abc/image_0_1.jpg") is True
    assert await media_store.delete("listings/abc/image_0_1.jpg") is False


@pytest.mark.asyncio
async def test_local_store_refuses_paths_outside_root(media_store):
    with pytest.raises(StorageError):
        await media_store.save("../escape.jpg", b"data", "image/jpeg")


@pytest.mark.asyncio
async def test_upload_images_keeps_order(make_image, media_store):
    urls = await media.upload_images([make_image("a.jpg", b"a"), make_image("b.jpg", b"b")], "listings/xyz")

    paths = [media_store.path_from_url(url) for url in urls]
    assert paths[0].startswith("listings/xyz/image_0_")
    assert paths[1].startswith("listings/xyz/image_1_")
    assert (media_store.root / paths[1]).read_bytes() == b"b"


@pytest.mark.asyncio
async def test_upload_rejects_non_images(make_image):
    with pytest.raises(HTTPException) as exc:
        await media.upload_image(make_image("notes.txt", b"hello", "text/plain"), "listings/x/image.jpg")

    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_upload_rejects_oversized_files(make_image, monkeypatch):
    monkeypatch.setattr(media.settings, "max_upload_bytes", 4)

    with pytest.raises(HTTPException) as exc:
        await media.upload_image(make_image(data=b"too large"), "listings/x/image.jpg")

    assert exc.value.status_code == 413


@pytest.mark.asyncio
async def test_profile_image_path(make_image, media_store):
    url = await media.upload_profile_image(make_image(), "user-1")

    assert media_store.path_from_url(url).startswith("profiles/user-1/profile_")


@pytest.mark.asyncio
async def test_deleting_missing_image_only_warns(media_store, caplog):
    with caplog.at_level(logging.WARNING, logger="manzil.services.media"):
        await media.delete_images(["/media/listings/gone/image_0_1.jpg"])

    assert "already removed" in caplog.text


@pytest.mark.asyncio
async def test_delete_images_attempts_every_url(make_image, media_store):
    kept = await media.upload_images([make_image()], "listings/abc")
    path = media_store.root / media_store.path_from_url(kept[0])

    with pytest.raises(StorageError):
        await media.delete_images(["https://example.com/elsewhere.jpg", *kept])

    assert not path.exists()


def test_folder_membership(media_store):
    assert media.in_folder("/media/listings/abc/image_0_1.jpg", "listings/abc")
    assert not media.in_folder("/media/listings/abcd/image_0_1.jpg", "listings/abc")
    assert not media.in_folder("/media/listings/abc/../xyz/image_0_1.jpg", "listings/abc")
    assert not media.in_folder("https://example.com/image.jpg", "listings/abc")

    media.check_image_ownership(["/media/listings/abc/a.jpg", "https://example.com/b.jpg"], "listings/abc")
    with pytest.raises(HTTPException) as exc:
        media.check_image_ownership(["/media/listings/xyz/a.jpg"], "listings/abc")
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_delete_rejects_foreign_urls():
    with pytest.raises(StorageError):
        await media.delete_image("https://example.com/elsewhere.jpg")


def test_image_budget():
    media.check_image_budget(4, 6)

    with pytest.raises(HTTPException) as exc:
        media.check_image_budget(4, 7)

    assert exc.value.status_code == 400
