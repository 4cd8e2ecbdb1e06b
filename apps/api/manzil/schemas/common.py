"""Schemas shared by listings and projects."""
from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class Location(BaseModel):
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    district: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class PriceRange(BaseModel):
    min: float = Field(ge=0)
    max: float = Field(ge=0)

    @model_validator(mode="after")
    def _ordered(self) -> "PriceRange":
        if self.min > self.max:
            raise ValueError("min must not exceed max")
        return self


class MapLinks(BaseModel):
    embed_url: str
    view_url: str


class ImageSelection(BaseModel):
    """Final photo set for an edit: kept URLs plus new uploads and a cover choice."""

    existing: list[str] = Field(default_factory=list)
    uploaded: list[str] = Field(default_factory=list)
    existing_cover_index: int | None = Field(default=None, ge=0)
    uploaded_cover_index: int | None = Field(default=None, ge=0)


class UploadResponse(BaseModel):
    urls: list[str]


class StatusResponse(BaseModel):
    status: str
