"""Schemas for listings and the approval queue."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, computed_field, field_validator

from ..models.listing import ListingStatus, PropertyCategory, PropertyType
from ..services.maps import build_map_links
from .common import ImageSelection, Location, MapLinks


class MainFeatures(BaseModel):
    built_in_year: int | None = None
    parking_spaces: int | None = Field(default=None, ge=0)
    double_glazed_windows: bool | None = None
    central_air_conditioning: bool | None = None
    central_heating: bool | None = None
    flooring: str | None = None
    electricity_backup: bool | None = None
    waste_disposal: bool | None = None
    floors: int | None = Field(default=None, ge=0)


class Rooms(BaseModel):
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    servant_quarters: int | None = Field(default=None, ge=0)
    drawing_room: bool | None = None
    dining_room: bool | None = None
    kitchens: int | None = Field(default=None, ge=0)
    study_room: bool | None = None
    prayer_room: bool | None = None
    powder_room: bool | None = None
    gym: bool | None = None
    store_rooms: int | None = Field(default=None, ge=0)
    steam_room: bool | None = None
    lounge: bool | None = None
    laundry_room: bool | None = None


class BusinessCommunication(BaseModel):
    broadband_internet: bool | None = None
    satellite_cable_tv: bool | None = None
    intercom: bool | None = None


class CommunityFeatures(BaseModel):
    community_lawn: bool | None = None
    community_swimming_pool: bool | None = None
    community_gym: bool | None = None
    medical_centre: bool | None = None
    day_care_centre: bool | None = None
    kids_play_area: bool | None = None
    barbeque_area: bool | None = None
    mosque: bool | None = None
    community_centre: bool | None = None


class HealthcareRecreation(BaseModel):
    lawn: bool | None = None
    swimming_pool: bool | None = None
    sauna: bool | None = None
    jacuzzi: bool | None = None


class NearbyLocations(BaseModel):
    nearby_schools: str | None = None
    nearby_hospitals: str | None = None
    nearby_shopping_malls: str | None = None
    nearby_restaurants: str | None = None
    distance_from_airport: float | None = Field(default=None, ge=0)
    nearby_public_transport: str | None = None
    other_nearby_places: str | None = None


class OtherFacilities(BaseModel):
    maintenance_staff: bool | None = None
    security_staff: bool | None = None
    facilities_for_disabled: bool | None = None
    other_facilities: str | None = None


def _require_text(value: str | None, label: str) -> str | None:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError(f"{label} is required")
    return value


def _check_location(location: Location | None) -> Location | None:
    if location is None:
        return location
    if not location.city.strip():
        raise ValueError("city is required")
    if not location.district:
        raise ValueError("district is required")
    if not location.address.strip():
        raise ValueError("address is required")
    return location


class _ListingFields(BaseModel):
    """Fields shared by create and update payloads."""

    price_in_dollar: float | None = Field(default=None, ge=0)
    property_category: PropertyCategory | None = None
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    area: float | None = Field(default=None, gt=0)
    year_built: int | None = Field(default=None, ge=1800, le=2200)
    parking: bool | None = None
    furnished: bool | None = None
    status: ListingStatus | None = None
    is_hot: bool | None = None
    is_verified: bool | None = None
    is_premium: bool | None = None
    is_featured: bool | None = None
    contact_phone: str | None = None
    contact_whatsapp: str | None = None
    contact_email: str | None = None
    main_features: MainFeatures | None = None
    rooms: Rooms | None = None
    business_communication: BusinessCommunication | None = None
    community_features: CommunityFeatures | None = None
    healthcare_recreation: HealthcareRecreation | None = None
    nearby_locations: NearbyLocations | None = None
    other_facilities: OtherFacilities | None = None

    @field_validator("title", "description", check_fields=False)
    @classmethod
    def text_not_blank(cls, value: str | None, info: ValidationInfo) -> str | None:
        return _require_text(value, info.field_name or "field")

    @field_validator("location", check_fields=False)
    @classmethod
    def location_complete(cls, value: Location | None) -> Location | None:
        return _check_location(value)


class ListingCreate(_ListingFields):
    title: str
    description: str
    price: float = Field(gt=0)
    property_type: PropertyType = PropertyType.SALE
    location: Location


class ListingUpdate(_ListingFields):
    title: str | None = None
    description: str | None = None
    price: float | None = Field(default=None, gt=0)
    property_type: PropertyType | None = None
    location: Location | None = None
    images: ImageSelection | None = None


class ListingFilters(BaseModel):
    property_type: PropertyType | None = None
    district: str | None = None
    category: PropertyCategory | None = None


class ListingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    property_id: str
    title: str
    description: str
    price: float
    price_in_dollar: float | None = None
    property_type: PropertyType
    property_category: PropertyCategory | None = None
    location: Location
    image_urls: list[str] = Field(default_factory=list)
    bedrooms: int | None = None
    bathrooms: int | None = None
    area: float | None = None
    year_built: int | None = None
    parking: bool | None = None
    furnished: bool | None = None
    main_features: dict[str, Any] | None = None
    rooms: dict[str, Any] | None = None
    business_communication: dict[str, Any] | None = None
    community_features: dict[str, Any] | None = None
    healthcare_recreation: dict[str, Any] | None = None
    nearby_locations: dict[str, Any] | None = None
    other_facilities: dict[str, Any] | None = None
    contact_phone: str | None = None
    contact_whatsapp: str | None = None
    contact_email: str | None = None
    status: ListingStatus
    is_hot: bool = False
    is_verified: bool = False
    is_premium: bool = False
    is_featured: bool = False
    created_by: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pending_approval: bool = False
    pending_delete: bool = False
    original_data: dict[str, Any] | None = None
    pending_changes: dict[str, Any] | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cover_image_url(self) -> str | None:
        return self.image_urls[0] if self.image_urls else None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def review_kind(self) -> Literal["new", "edit", "delete"] | None:
        if self.pending_delete:
            return "delete"
        if not self.pending_approval:
            return None
        return "edit" if self.original_data is not None else "new"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def map_links(self) -> MapLinks | None:
        links = build_map_links(self.location.model_dump())
        return MapLinks(**links) if links else None


class DistrictCounts(BaseModel):
    counts: dict[str, dict[str, int]]


ReviewAction = Literal[
    "approved_new",
    "rejected_new",
    "approved_edit",
    "rejected_edit",
    "approved_delete",
    "rejected_delete",
]


class ReviewOutcome(BaseModel):
    action: ReviewAction
    listing_id: str
    listing: ListingOut | None = None


class DeleteOutcome(BaseModel):
    listing_id: str
    status: Literal["deleted", "delete_requested"]
    listing: ListingOut | None = None


class ApprovalQueue(BaseModel):
    approvals: list[ListingOut]
    deletes: list[ListingOut]
