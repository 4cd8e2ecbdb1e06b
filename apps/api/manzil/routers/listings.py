"""Listing endpoints: public browsing and agent/admin authoring."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..models.listing import PropertyCategory, PropertyType
from ..models.user import User
from ..schemas import common as common_schema
from ..schemas import listings as listings_schema
from ..services import listings as listings_service
from .deps import get_optional_user, require_author

router = APIRouter()


@router.get("", response_model=list[listings_schema.ListingOut])
async def list_listings(
    property_type: PropertyType | None = None,
    district: str | None = Query(default=None, description="District name, or 'all'"),
    category: PropertyCategory | None = None,
    session: AsyncSession = Depends(get_session),
) -> list[listings_schema.ListingOut]:
    """Return published listings, newest first."""

    filters = listings_schema.ListingFilters(property_type=property_type, district=district, category=category)
    return await listings_service.list_public(session, filters)


@router.get("/featured", response_model=list[listings_schema.ListingOut])
async def featured(session: AsyncSession = Depends(get_session)) -> list[listings_schema.ListingOut]:
    return await listings_service.featured_listings(session)


@router.get("/district-counts", response_model=listings_schema.DistrictCounts)
async def district_counts(session: AsyncSession = Depends(get_session)) -> listings_schema.DistrictCounts:
    return await listings_service.district_counts(session)


@router.get("/mine", response_model=list[listings_schema.ListingOut])
async def my_listings(
    user: User = Depends(require_author),
    session: AsyncSession = Depends(get_session),
) -> list[listings_schema.ListingOut]:
    """Return the caller's listings, including ones under review."""

    return await listings_service.my_listings(user, session)


@router.post("", response_model=listings_schema.ListingOut, status_code=status.HTTP_201_CREATED)
async def create_listing(
    payload: listings_schema.ListingCreate,
    user: User = Depends(require_author),
    session: AsyncSession = Depends(get_session),
) -> listings_schema.ListingOut:
    return await listings_service.create_listing(payload, user, session)


@router.get("/{term}", response_model=listings_schema.ListingOut)
async def get_listing(
    term: str,
    viewer: User | None = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
) -> listings_schema.ListingOut:
    """Fetch a listing by property ID (``AM1234``) or opaque ID."""

    return await listings_service.lookup(term, viewer, session)


@router.patch("/{listing_id}", response_model=listings_schema.ListingOut)
async def update_listing(
    listing_id: str,
    payload: listings_schema.ListingUpdate,
    user: User = Depends(require_author),
    session: AsyncSession = Depends(get_session),
) -> listings_schema.ListingOut:
    return await listings_service.update_listing(listing_id, payload, user, session)


@router.delete("/{listing_id}", response_model=listings_schema.DeleteOutcome)
async def delete_listing(
    listing_id: str,
    user: User = Depends(require_author),
    session: AsyncSession = Depends(get_session),
) -> listings_schema.DeleteOutcome:
    """Delete (admins) or request deletion (agents)."""

    return await listings_service.delete_listing(listing_id, user, session)


@router.put("/{listing_id}/images", response_model=listings_schema.ListingOut)
async def set_images(
    listing_id: str,
    files: list[UploadFile] = File(...),
    cover_index: int | None = Form(default=None, ge=0),
    user: User = Depends(require_author),
    session: AsyncSession = Depends(get_session),
) -> listings_schema.ListingOut:
    """Replace the listing photos; the file at ``cover_index`` becomes the cover."""

    return await listings_service.set_listing_images(listing_id, files, cover_index, user, session)


@router.post("/{listing_id}/uploads", response_model=common_schema.UploadResponse)
async def upload_images(
    listing_id: str,
    files: list[UploadFile] = File(...),
    user: User = Depends(require_author),
    session: AsyncSession = Depends(get_session),
) -> common_schema.UploadResponse:
    """Store photos to reference from a later edit."""

    urls = await listings_service.upload_listing_images(listing_id, files, user, session)
    return common_schema.UploadResponse(urls=urls)
