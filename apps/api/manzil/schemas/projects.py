"""Schemas for development projects."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from ..models.project import ProjectStatus
from ..services.maps import build_map_links
from .common import ImageSelection, Location, MapLinks, PriceRange

ProjectUnitType = Literal["apartment", "penthouse", "office", "commercial", "plot", "villa"]


class ProjectType(BaseModel):
    type: ProjectUnitType
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    area: float | None = Field(default=None, gt=0)
    price_range: PriceRange | None = None
    price_in_dollar_range: PriceRange | None = None


class ProjectFeatures(BaseModel):
    main_features: list[str] = Field(default_factory=list)
    business_and_communication: list[str] = Field(default_factory=list)
    healthcare_and_recreation: list[str] = Field(default_factory=list)
    community_features: list[str] = Field(default_factory=list)
    nearby_facilities: list[str] = Field(default_factory=list)
    other_facilities: list[str] = Field(default_factory=list)


class DevelopmentUpdate(BaseModel):
    date: datetime
    title: str
    description: str = ""
    images: list[str] = Field(default_factory=list)


class PaymentPlan(BaseModel):
    name: str
    description: str = ""
    image_url: str | None = None


class FloorPlan(BaseModel):
    name: str
    image_url: str
    description: str | None = None


class _ProjectFields(BaseModel):
    marketed_by: str | None = None
    project_types: list[ProjectType] | None = None
    price_range: PriceRange | None = None
    price_in_dollar_range: PriceRange | None = None
    features: ProjectFeatures | None = None
    development_updates: list[DevelopmentUpdate] | None = None
    payment_plans: list[PaymentPlan] | None = None
    floor_plans: list[FloorPlan] | None = None
    walkthrough_3d_url: str | None = None
    contact_phone: str | None = None
    contact_whatsapp: str | None = None
    contact_email: str | None = None

    @field_validator("name", "developer", "developed_by", check_fields=False)
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class ProjectCreate(_ProjectFields):
    name: str
    description: str = ""
    developer: str
    developed_by: str
    location: Location
    status: ProjectStatus = ProjectStatus.UPCOMING


class ProjectUpdate(_ProjectFields):
    name: str | None = None
    description: str | None = None
    developer: str | None = None
    developed_by: str | None = None
    location: Location | None = None
    status: ProjectStatus | None = None
    images: ImageSelection | None = None


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    name: str
    description: str
    developer: str
    developed_by: str
    marketed_by: str | None = None
    location: Location
    image_urls: list[str] = Field(default_factory=list)
    project_types: list[dict[str, Any]] = Field(default_factory=list)
    price_range: dict[str, Any] | None = None
    price_in_dollar_range: dict[str, Any] | None = None
    features: dict[str, Any] = Field(default_factory=dict)
    development_updates: list[dict[str, Any]] = Field(default_factory=list)
    payment_plans: list[dict[str, Any]] = Field(default_factory=list)
    floor_plans: list[dict[str, Any]] = Field(default_factory=list)
    walkthrough_3d_url: str | None = None
    contact_phone: str | None = None
    contact_whatsapp: str | None = None
    contact_email: str | None = None
    status: ProjectStatus
    created_by: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cover_image_url(self) -> str | None:
        return self.image_urls[0] if self.image_urls else None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def map_links(self) -> MapLinks | None:
        links = build_map_links(self.location.model_dump())
        return MapLinks(**links) if links else None
