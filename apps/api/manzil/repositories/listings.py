"""Data access helpers for listings."""
from __future__ import annotations

from typing import Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.listing import Listing, ListingStatus


async def get_by_id(session: AsyncSession, listing_id: str, *, for_update: bool = False) -> Listing | None:
    """Return a listing by its opaque identifier, optionally row-locked."""

    stmt: Select[tuple[Listing]] = select(Listing).where(Listing.id == listing_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_by_property_id(session: AsyncSession, property_id: str) -> Listing | None:
    stmt = select(Listing).where(func.upper(Listing.property_id) == property_id.upper()).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_public(session: AsyncSession) -> list[Listing]:
    """Active listings with no outstanding review, newest first."""

    stmt = (
        select(Listing)
        .where(
            Listing.status == ListingStatus.ACTIVE,
            Listing.pending_approval.is_(False),
            Listing.pending_delete.is_(False),
        )
        .order_by(Listing.created_at.desc(), Listing.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_by_creators(session: AsyncSession, creator_ids: Sequence[str]) -> list[Listing]:
    """Listings authored by any of ``creator_ids``, excluding delete requests."""

    if not creator_ids:
        return []
    stmt = (
        select(Listing)
        .where(Listing.created_by.in_(list(creator_ids)), Listing.pending_delete.is_(False))
        .order_by(Listing.created_at.desc(), Listing.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_pending_approvals(session: AsyncSession) -> list[Listing]:
    """New listings and edits awaiting review; delete requests have their own queue."""

    stmt = (
        select(Listing)
        .where(Listing.pending_approval.is_(True), Listing.pending_delete.is_(False))
        .order_by(Listing.updated_at.desc(), Listing.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_pending_deletes(session: AsyncSession) -> list[Listing]:
    stmt = (
        select(Listing)
        .where(Listing.pending_delete.is_(True))
        .order_by(Listing.updated_at.desc(), Listing.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
