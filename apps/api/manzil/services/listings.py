"""Listing authoring and public reads."""
from __future__ import annotations

import logging
import random
from collections import defaultdict
from typing import Any, Sequence
from uuid import uuid4

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.listing import EDITABLE_FIELDS, Listing, ListingStatus, PropertyCategory, PropertyType
from ..models.user import User, UserRole
from ..repositories import listings as listings_repo
from ..repositories import users as users_repo
from ..schemas import listings as schemas
from . import media, sequence
from .auth import normalise_role

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 6

# Columns that cannot be cleared through an update.
REQUIRED_FIELDS = frozenset(
    {
        "title",
        "description",
        "price",
        "property_type",
        "location",
        "image_urls",
        "is_hot",
        "is_verified",
        "is_premium",
        "is_featured",
    }
)

_ENUM_FIELDS: dict[str, type] = {
    "property_type": PropertyType,
    "property_category": PropertyCategory,
}


def _changes_from(payload: schemas.ListingCreate | schemas.ListingUpdate, *, partial: bool = True) -> dict[str, Any]:
    """JSON-safe field changes carried by ``payload``; ``status`` and ``images`` are handled separately."""

    data = payload.model_dump(exclude_unset=partial, exclude={"images", "status"}, mode="json")
    return {key: value for key, value in data.items() if value is not None or key not in REQUIRED_FIELDS}


def apply_changes(listing: Listing, changes: dict[str, Any]) -> None:
    for name, value in changes.items():
        if name not in EDITABLE_FIELDS:
            continue
        if value is None and name in REQUIRED_FIELDS:
            continue
        enum_cls = _ENUM_FIELDS.get(name)
        if enum_cls is not None and value is not None:
            value = enum_cls(value)
        setattr(listing, name, value)


def _author_role(user: User) -> UserRole:
    role = normalise_role(user.role)
    if role not in (UserRole.ADMIN, UserRole.AGENT):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only agents and admins can manage listings")
    return role


def _ensure_can_modify(listing: Listing, user: User, role: UserRole) -> None:
    if role is UserRole.AGENT and listing.created_by != user.uid:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only modify your own listings")


async def _get_or_404(session: AsyncSession, listing_id: str, *, for_update: bool = False) -> Listing:
    listing = await listings_repo.get_by_id(session, listing_id, for_update=for_update)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    return listing


def _to_out(listing: Listing) -> schemas.ListingOut:
    return schemas.ListingOut.model_validate(listing)


def _folder(listing_id: str) -> str:
    return f"listings/{listing_id}"


def _merged_images(selection: schemas.ImageSelection, listing_id: str) -> list[str]:
    media.check_image_budget(len(selection.existing), len(selection.uploaded))
    media.check_image_ownership([*selection.existing, *selection.uploaded], _folder(listing_id))
    return media.merge_with_cover(
        selection.existing,
        selection.uploaded,
        existing_cover_index=selection.existing_cover_index,
        uploaded_cover_index=selection.uploaded_cover_index,
    )


def stored_images(listing: Listing) -> list[str]:
    """Stored image URLs under the listing's own folder, including a staged edit."""

    urls = list(listing.image_urls or [])
    staged = (listing.pending_changes or {}).get("image_urls") or []
    urls.extend(url for url in staged if url not in urls)
    return [url for url in urls if media.in_folder(url, _folder(listing.id))]


async def discard_images(urls: Sequence[str]) -> None:
    """Remove images of a deleted listing; the listing is already gone so failures are only logged."""

    if not urls:
        return
    try:
        await media.delete_images(urls)
    except media.StorageError:
        logger.warning("Could not remove %d images from the media store", len(urls), exc_info=True)


async def create_listing(payload: schemas.ListingCreate, user: User, session: AsyncSession) -> schemas.ListingOut:
    """Create a listing; agent submissions wait for admin approval."""

    role = _author_role(user)
    now = utcnow()
    async with session.begin():
        property_id = await sequence.next_property_id(session)
        listing = Listing(
            id=str(uuid4()),
            property_id=property_id,
            image_urls=[],
            is_hot=False,
            is_verified=False,
            is_premium=False,
            is_featured=False,
            created_by=user.uid,
            created_at=now,
            updated_at=now,
            pending_delete=False,
        )
        apply_changes(listing, _changes_from(payload, partial=False))
        if role is UserRole.AGENT:
            listing.status = ListingStatus.PENDING
            listing.pending_approval = True
        else:
            listing.status = payload.status or ListingStatus.ACTIVE
            listing.pending_approval = False
        session.add(listing)
        await session.flush()

    logger.info("Listing %s (%s) created by %s %s", listing.id, property_id, role.value, user.uid)
    return _to_out(listing)


async def update_listing(
    listing_id: str,
    payload: schemas.ListingUpdate,
    user: User,
    session: AsyncSession,
) -> schemas.ListingOut:
    """Apply an edit, staging it for review when an agent changes a live listing."""

    role = _author_role(user)
    changes = _changes_from(payload)
    if payload.images is not None:
        changes["image_urls"] = _merged_images(payload.images, listing_id)

    async with session.begin():
        listing = await _get_or_404(session, listing_id, for_update=True)
        _ensure_can_modify(listing, user, role)

        if role is UserRole.ADMIN:
            apply_changes(listing, changes)
            if not listing.awaits_new_approval:
                if payload.status is not None:
                    listing.status = payload.status
                listing.pending_approval = False
                listing.original_data = None
                listing.pending_changes = None
            outcome = "applied"
        elif listing.pending_delete:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Listing has a pending delete request",
            )
        elif not changes:
            logger.warning("Edit of listing %s by %s had no fields to change", listing_id, user.uid)
            return _to_out(listing)
        elif listing.awaits_new_approval:
            # not live yet, the pending review already covers it
            apply_changes(listing, changes)
            outcome = "applied"
        elif listing.pending_approval:
            listing.pending_changes = {**(listing.pending_changes or {}), **changes}
            outcome = "merged"
        else:
            listing.original_data = listing.snapshot()
            listing.pending_changes = changes
            listing.pending_approval = True
            outcome = "staged"
        listing.updated_at = utcnow()

    logger.info("Edit of listing %s by %s %s: %s", listing_id, user.uid, outcome, sorted(changes))
    return _to_out(listing)


async def delete_listing(listing_id: str, user: User, session: AsyncSession) -> schemas.DeleteOutcome:
    """Delete outright for admins; agents file a delete request instead."""

    role = _author_role(user)
    images: list[str] = []
    async with session.begin():
        listing = await _get_or_404(session, listing_id, for_update=True)
        _ensure_can_modify(listing, user, role)
        if role is UserRole.ADMIN:
            images = stored_images(listing)
            await session.delete(listing)
        elif not listing.pending_delete:
            listing.pending_delete = True
            listing.updated_at = utcnow()

    if role is UserRole.ADMIN:
        logger.info("Listing %s deleted by %s", listing_id, user.uid)
        await discard_images(images)
        return schemas.DeleteOutcome(listing_id=listing_id, status="deleted")

    logger.info("Delete of listing %s requested by %s", listing_id, user.uid)
    return schemas.DeleteOutcome(listing_id=listing_id, status="delete_requested", listing=_to_out(listing))


def _ensure_can_replace_images(listing: Listing, user: User, role: UserRole) -> None:
    _ensure_can_modify(listing, user, role)
    if role is UserRole.AGENT and not listing.awaits_new_approval:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Images of a published listing change through an edit",
        )


async def set_listing_images(
    listing_id: str,
    files: Sequence[UploadFile],
    cover_index: int | None,
    user: User,
    session: AsyncSession,
) -> schemas.ListingOut:
    """Upload ``files`` with the chosen cover first and make them the listing's photos.

    Access is checked before the upload and again on the locked row before the
    write, since the listing may have been reviewed while files were uploading.
    """

    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="At least one image is required")
    media.check_image_budget(0, len(files))
    role = _author_role(user)
    async with session.begin():
        _ensure_can_replace_images(await _get_or_404(session, listing_id), user, role)

    ordered = media.move_cover_to_front(files, cover_index)
    urls = await media.upload_images(ordered, _folder(listing_id))

    try:
        async with session.begin():
            listing = await _get_or_404(session, listing_id, for_update=True)
            _ensure_can_replace_images(listing, user, role)
            listing.image_urls = urls
            listing.updated_at = utcnow()
    except HTTPException:
        await discard_images(urls)
        raise

    logger.info("Listing %s now has %d images", listing_id, len(urls))
    return _to_out(listing)


async def upload_listing_images(
    listing_id: str,
    files: Sequence[UploadFile],
    user: User,
    session: AsyncSession,
) -> list[str]:
    """Store photos for a later edit without touching the listing."""

    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="At least one image is required")
    media.check_image_budget(0, len(files))
    role = _author_role(user)
    listing = await _get_or_404(session, listing_id)
    _ensure_can_modify(listing, user, role)
    await session.commit()
    return await media.upload_images(files, _folder(listing_id))


def _canonical_type(value: PropertyType | None) -> PropertyType | None:
    return PropertyType.BAI_WAFA if value is PropertyType.PLEDGE else value


def matches_filters(listing: Listing, filters: schemas.ListingFilters) -> bool:
    if filters.property_type is not None:
        if _canonical_type(listing.property_type) is not _canonical_type(filters.property_type):
            return False
    district = (filters.district or "").strip()
    if district and district.lower() != "all":
        if (listing.location or {}).get("district") != district:
            return False
    if filters.category is not None and listing.property_category is not filters.category:
        return False
    return True


async def list_public(
    session: AsyncSession,
    filters: schemas.ListingFilters | None = None,
) -> list[schemas.ListingOut]:
    listings = await listings_repo.list_public(session)
    if filters is not None:
        listings = [item for item in listings if matches_filters(item, filters)]
    return [_to_out(item) for item in listings]


async def district_counts(session: AsyncSession) -> schemas.DistrictCounts:
    counts: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for listing in await listings_repo.list_public(session):
        district = (listing.location or {}).get("district")
        if not district:
            continue
        kind = _canonical_type(listing.property_type)
        counts[district][kind.value] += 1
    return schemas.DistrictCounts(counts={district: dict(kinds) for district, kinds in counts.items()})


def select_featured(
    listings: Sequence[Listing],
    limit: int = FEATURED_LIMIT,
    rng: random.Random | None = None,
) -> list[Listing]:
    """Newest featured listings, padded with random others when fewer than ``limit`` are featured.

    ``listings`` is expected newest first.
    """

    featured = [item for item in listings if item.is_featured]
    if len(featured) >= limit:
        return featured[:limit]
    others = [item for item in listings if not item.is_featured]
    rng = rng or random.Random()
    return featured + rng.sample(others, min(limit - len(featured), len(others)))


async def featured_listings(session: AsyncSession) -> list[schemas.ListingOut]:
    listings = await listings_repo.list_public(session)
    return [_to_out(item) for item in select_featured(listings)]


def _visible_to(listing: Listing, viewer: User | None) -> bool:
    if not (listing.pending_approval or listing.pending_delete or listing.status is ListingStatus.PENDING):
        return True
    if viewer is None:
        return False
    return normalise_role(viewer.role) is UserRole.ADMIN or viewer.uid == listing.created_by


async def lookup(term: str, viewer: User | None, session: AsyncSession) -> schemas.ListingOut:
    """Find a listing by ``AM1234`` style property ID or by opaque ID.

    Listings under review are only shown to their author and to admins.
    """

    term = term.strip()
    listing: Listing | None = None
    if sequence.LISTING_ID_PATTERN.match(term):
        listing = await listings_repo.get_by_property_id(session, term)
    if listing is None:
        listing = await listings_repo.get_by_id(session, term)
    if listing is None or not _visible_to(listing, viewer):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    return _to_out(listing)


async def my_listings(user: User, session: AsyncSession) -> list[schemas.ListingOut]:
    listings = await listings_repo.list_by_creators(session, [user.uid])
    return [_to_out(item) for item in listings]


async def agent_listings(session: AsyncSession) -> list[schemas.ListingOut]:
    agents = await users_repo.list_uids_with_role(session, UserRole.AGENT)
    listings = await listings_repo.list_by_creators(session, agents)
    return [_to_out(item) for item in listings]
