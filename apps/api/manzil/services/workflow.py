"""Admin review of agent submissions.

A listing is in at most one review state at a time:

* ``new``: agent-created, ``pending_approval`` with no ``original_data``.
* ``edit``: agent edit of a live listing, ``original_data`` holds the
  pre-edit snapshot and ``pending_changes`` the proposed fields.
* ``delete``: ``pending_delete`` set by an agent's delete request.

Each transition locks the row and runs in a single transaction. Applying a
transition to a listing in another state is a conflict.
"""
from __future__ import annotations

import logging
from typing import Literal

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.listing import Listing, ListingStatus
from ..models.user import User
from ..repositories import listings as listings_repo
from ..schemas import listings as schemas
from . import listings as listings_service

logger = logging.getLogger(__name__)

ReviewKind = Literal["new", "edit", "delete"]


def review_kind(listing: Listing) -> ReviewKind | None:
    if listing.pending_delete:
        return "delete"
    if not listing.pending_approval:
        return None
    return "edit" if listing.original_data is not None else "new"


def _clear_edit(listing: Listing) -> None:
    listing.pending_approval = False
    listing.original_data = None
    listing.pending_changes = None


async def _review(
    listing_id: str,
    admin: User,
    session: AsyncSession,
    *,
    approve: bool,
    expected: ReviewKind | None = None,
) -> schemas.ReviewOutcome:
    removed_images: list[str] | None = None
    async with session.begin():
        listing = await listings_repo.get_by_id(session, listing_id, for_update=True)
        if listing is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")

        kind = review_kind(listing)
        if kind is None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Listing has no pending review")
        if expected is not None and kind != expected:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Listing is pending {kind} review, not {expected}",
            )

        if kind == "new":
            if approve:
                listing.status = ListingStatus.ACTIVE
                listing.pending_approval = False
            else:
                removed_images = listings_service.stored_images(listing)
        elif kind == "edit":
            if approve:
                listings_service.apply_changes(listing, listing.pending_changes or {})
            _clear_edit(listing)
        elif approve:
            removed_images = listings_service.stored_images(listing)
        else:
            listing.pending_delete = False

        if removed_images is None:
            listing.updated_at = utcnow()
        else:
            await session.delete(listing)

    action = f"{'approved' if approve else 'rejected'}_{kind}"
    logger.info("Listing %s (%s) %s by %s", listing_id, listing.property_id, action.replace("_", " "), admin.uid)

    if removed_images is not None:
        await listings_service.discard_images(removed_images)
        return schemas.ReviewOutcome(action=action, listing_id=listing_id)
    return schemas.ReviewOutcome(
        action=action,
        listing_id=listing_id,
        listing=schemas.ListingOut.model_validate(listing),
    )


async def approve_new(listing_id: str, admin: User, session: AsyncSession) -> schemas.ReviewOutcome:
    return await _review(listing_id, admin, session, approve=True, expected="new")


async def reject_new(listing_id: str, admin: User, session: AsyncSession) -> schemas.ReviewOutcome:
    return await _review(listing_id, admin, session, approve=False, expected="new")


async def approve_edit(listing_id: str, admin: User, session: AsyncSession) -> schemas.ReviewOutcome:
    return await _review(listing_id, admin, session, approve=True, expected="edit")


async def reject_edit(listing_id: str, admin: User, session: AsyncSession) -> schemas.ReviewOutcome:
    return await _review(listing_id, admin, session, approve=False, expected="edit")


async def approve_delete(listing_id: str, admin: User, session: AsyncSession) -> schemas.ReviewOutcome:
    return await _review(listing_id, admin, session, approve=True, expected="delete")


async def reject_delete(listing_id: str, admin: User, session: AsyncSession) -> schemas.ReviewOutcome:
    return await _review(listing_id, admin, session, approve=False, expected="delete")


async def approve(listing_id: str, admin: User, session: AsyncSession) -> schemas.ReviewOutcome:
    """Approve whichever review the listing is waiting on."""

    return await _review(listing_id, admin, session, approve=True)


async def reject(listing_id: str, admin: User, session: AsyncSession) -> schemas.ReviewOutcome:
    """Reject whichever review the listing is waiting on."""

    return await _review(listing_id, admin, session, approve=False)


async def pending_queue(session: AsyncSession) -> schemas.ApprovalQueue:
    approvals = await listings_repo.list_pending_approvals(session)
    deletes = await listings_repo.list_pending_deletes(session)
    return schemas.ApprovalQueue(
        approvals=[schemas.ListingOut.model_validate(item) for item in approvals],
        deletes=[schemas.ListingOut.model_validate(item) for item in deletes],
    )
