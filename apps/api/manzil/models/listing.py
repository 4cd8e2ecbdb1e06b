"""Listing model."""
from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Enum, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONDocument, utcnow


class PropertyType(str, enum.Enum):
    RENT = "rent"
    SALE = "sale"
    BAI_WAFA = "bai-wafa"
    SHARIK_ABAD = "sharik-abad"
    PLEDGE = "pledge"  # legacy spelling of bai-wafa


class PropertyCategory(str, enum.Enum):
    HOUSE = "house"
    APARTMENT = "apartment"
    LAND = "land"
    SHOP = "shop"


class ListingStatus(str, enum.Enum):
    ACTIVE = "active"
    SOLD = "sold"
    PENDING = "pending"
    RENTED = "rented"
    PLEDGED = "pledged"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


# Fields an author may change; workflow and ownership columns are not included.
EDITABLE_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "price",
    "price_in_dollar",
    "property_type",
    "property_category",
    "location",
    "image_urls",
    "bedrooms",
    "bathrooms",
    "area",
    "year_built",
    "parking",
    "furnished",
    "is_hot",
    "is_verified",
    "is_premium",
    "is_featured",
    "contact_phone",
    "contact_whatsapp",
    "contact_email",
    "main_features",
    "rooms",
    "business_communication",
    "community_features",
    "healthcare_recreation",
    "nearby_locations",
    "other_facilities",
)


class Listing(Base):
    """A property offered for rent, sale or bai-wafa."""

    __tablename__ = "listings"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    property_id: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price: Mapped[float] = mapped_column(Float, nullable=False)
    price_in_dollar: Mapped[float | None] = mapped_column(Float)
    property_type: Mapped[PropertyType] = mapped_column(
        Enum(PropertyType, name="property_type", values_callable=_enum_values),
        nullable=False,
        default=PropertyType.SALE,
    )
    property_category: Mapped[PropertyCategory | None] = mapped_column(
        Enum(PropertyCategory, name="property_category", values_callable=_enum_values)
    )
    location: Mapped[dict] = mapped_column(JSONDocument, default=dict, nullable=False)
    image_urls: Mapped[list[str]] = mapped_column(JSONDocument, default=list, nullable=False)

    bedrooms: Mapped[int | None] = mapped_column(Integer)
    bathrooms: Mapped[int | None] = mapped_column(Integer)
    area: Mapped[float | None] = mapped_column(Float)
    year_built: Mapped[int | None] = mapped_column(Integer)
    parking: Mapped[bool | None] = mapped_column(Boolean)
    furnished: Mapped[bool | None] = mapped_column(Boolean)

    main_features: Mapped[dict | None] = mapped_column(JSONDocument)
    rooms: Mapped[dict | None] = mapped_column(JSONDocument)
    business_communication: Mapped[dict | None] = mapped_column(JSONDocument)
    community_features: Mapped[dict | None] = mapped_column(JSONDocument)
    healthcare_recreation: Mapped[dict | None] = mapped_column(JSONDocument)
    nearby_locations: Mapped[dict | None] = mapped_column(JSONDocument)
    other_facilities: Mapped[dict | None] = mapped_column(JSONDocument)

    contact_phone: Mapped[str | None] = mapped_column(String)
    contact_whatsapp: Mapped[str | None] = mapped_column(String)
    contact_email: Mapped[str | None] = mapped_column(String)

    status: Mapped[ListingStatus] = mapped_column(
        Enum(ListingStatus, name="listing_status", values_callable=_enum_values),
        nullable=False,
        default=ListingStatus.ACTIVE,
        index=True,
    )
    is_hot: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_by: Mapped[str] = mapped_column(String, index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    pending_approval: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    pending_delete: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    original_data: Mapped[dict | None] = mapped_column(JSONDocument)
    pending_changes: Mapped[dict | None] = mapped_column(JSONDocument)

    @property
    def awaits_new_approval(self) -> bool:
        """True while an agent-created listing has never been approved."""

        return self.pending_approval and self.original_data is None

    def snapshot(self) -> dict[str, Any]:
        """JSON-safe copy of the author-visible state, used as ``original_data``."""

        data: dict[str, Any] = {"property_id": self.property_id, "status": self.status.value}
        for name in EDITABLE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, enum.Enum):
                value = value.value
            elif isinstance(value, dict):
                value = dict(value)
            elif isinstance(value, list):
                value = list(value)
            data[name] = value
        return data
