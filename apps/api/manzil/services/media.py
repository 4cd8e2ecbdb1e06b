"""Image storage and cover ordering.

Uploaded images are written to the media store and addressed by public
download URLs. The first URL of a listing or project is its cover.
"""
from __future__ import annotations

import asyncio
import logging
import posixpath
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence, TypeVar
from urllib.parse import quote, unquote

from fastapi import HTTPException, UploadFile, status

from ..core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageError(RuntimeError):
    """Raised when the media store cannot persist or remove an object."""


def move_cover_to_front(items: Sequence[T], cover_index: int | None) -> list[T]:
    """Return ``items`` with the element at ``cover_index`` moved to position 0.

    An index of 0, ``None`` or one outside the sequence leaves the order as is.
    """

    ordered = list(items)
    if cover_index is None or cover_index <= 0 or cover_index >= len(ordered):
        return ordered
    cover = ordered.pop(cover_index)
    ordered.insert(0, cover)
    return ordered


def merge_with_cover(
    existing: Sequence[str],
    uploaded: Sequence[str],
    *,
    existing_cover_index: int | None = None,
    uploaded_cover_index: int | None = None,
) -> list[str]:
    """Combine kept and freshly uploaded URLs, then put the chosen cover first.

    A cover picked among the uploads wins over one picked among the existing
    images; its index is shifted past the existing block before reordering.
    """

    combined = [*existing, *uploaded]
    cover_index = 0
    if uploaded_cover_index is not None and 0 <= uploaded_cover_index < len(uploaded):
        cover_index = len(existing) + uploaded_cover_index
    elif existing_cover_index is not None and 0 <= existing_cover_index < len(existing):
        cover_index = existing_cover_index
    return move_cover_to_front(combined, cover_index)


class MediaStore(Protocol):
    async def save(self, path: str, data: bytes, content_type: str | None) -> str: ...

    async def delete(self, path: str) -> bool: ...

    def path_from_url(self, url: str) -> str | None: ...


@dataclass(slots=True)
class LocalMediaStore:
    """Filesystem-backed store served by the API under ``base_url``."""

    root: Path
    base_url: str

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if self.root.resolve() not in target.parents:
            raise StorageError(f"Refusing to touch path outside media root: {path}")
        return target

    async def save(self, path: str, data: bytes, content_type: str | None) -> str:
        target = self._resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise StorageError(f"Failed to store {path}: {exc}") from exc
        return f"{self.base_url.rstrip('/')}/{quote(path)}"

    async def delete(self, path: str) -> bool:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageError(f"Failed to delete {path}: {exc}") from exc
        return True

    def path_from_url(self, url: str) -> str | None:
        prefix = f"{self.base_url.rstrip('/')}/"
        marker = url.find(prefix)
        if marker == -1:
            return None
        path = unquote(url[marker + len(prefix):].split("?", 1)[0])
        return path or None


_store: MediaStore | None = None


def get_media_store() -> MediaStore:
    global _store
    if _store is None:
        _store = LocalMediaStore(root=Path(settings.media_root), base_url=settings.media_base_url)
    return _store


def set_media_store(store: MediaStore | None) -> None:
    """Swap the active store (tests, alternative backends)."""

    global _store
    _store = store


def _millis() -> int:
    return int(time.time() * 1000)


async def _read_image(file: UploadFile) -> bytes:
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{file.filename or 'file'} is not an image",
        )
    data = await file.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{file.filename or 'file'} is empty")
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"{file.filename or 'file'} exceeds {settings.max_upload_bytes} bytes",
        )
    return data


async def upload_image(file: UploadFile, path: str) -> str:
    data = await _read_image(file)
    url = await get_media_store().save(path, data, file.content_type)
    logger.info("Uploaded %s", path)
    return url


async def upload_images(files: Sequence[UploadFile], folder: str) -> list[str]:
    """Upload ``files`` in parallel, preserving their order in the result.

    Files stored before a failure are left in place.
    """

    stamp = _millis()
    uploads = [upload_image(file, f"{folder}/image_{index}_{stamp}.jpg") for index, file in enumerate(files)]
    urls = await asyncio.gather(*uploads)
    logger.info("Uploaded %d images to %s", len(urls), folder)
    return list(urls)


async def upload_profile_image(file: UploadFile, uid: str) -> str:
    return await upload_image(file, f"profiles/{uid}/profile_{_millis()}.jpg")


async def delete_image(url: str) -> None:
    store = get_media_store()
    path = store.path_from_url(url)
    if not path:
        raise StorageError(f"Not a media URL: {url}")
    if not await store.delete(path):
        logger.warning("Image already removed: %s", url)


async def delete_images(urls: Sequence[str]) -> None:
    """Delete every URL, then raise ``StorageError`` if any of them failed."""

    results = await asyncio.gather(*(delete_image(url) for url in urls), return_exceptions=True)
    failures = [(url, result) for url, result in zip(urls, results) if isinstance(result, BaseException)]
    for url, error in failures:
        logger.warning("Could not delete %s: %s", url, error)
    logger.info("Deleted %d of %d images", len(urls) - len(failures), len(urls))
    if failures:
        raise StorageError(f"Failed to delete {len(failures)} of {len(urls)} images")


def in_folder(url: str, folder: str) -> bool:
    """True when ``url`` addresses a stored object under ``folder``."""

    path = get_media_store().path_from_url(url)
    if path is None:
        return False
    return posixpath.normpath(path).startswith(f"{folder.rstrip('/')}/")


def check_image_ownership(urls: Sequence[str], folder: str) -> None:
    """Reject media URLs stored for another listing or project; external URLs pass."""

    store = get_media_store()
    for url in urls:
        if store.path_from_url(url) is not None and not in_folder(url, folder):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Image does not belong to this item: {url}",
            )


def check_image_budget(current: int, incoming: int) -> None:
    if current + incoming > settings.max_images_per_listing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {settings.max_images_per_listing} images are allowed",
        )
