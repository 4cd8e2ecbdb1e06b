"""Development project model."""
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONDocument, utcnow


class ProjectStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    UNDER_CONSTRUCTION = "under-construction"
    COMPLETED = "completed"
    SOLD_OUT = "sold-out"


class Project(Base):
    """A development with several unit types on offer."""

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    project_id: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    developer: Mapped[str] = mapped_column(String, nullable=False, default="")
    developed_by: Mapped[str] = mapped_column(String, nullable=False, default="")
    marketed_by: Mapped[str | None] = mapped_column(String)
    location: Mapped[dict] = mapped_column(JSONDocument, default=dict, nullable=False)
    image_urls: Mapped[list[str]] = mapped_column(JSONDocument, default=list, nullable=False)

    project_types: Mapped[list[dict]] = mapped_column(JSONDocument, default=list, nullable=False)
    price_range: Mapped[dict | None] = mapped_column(JSONDocument)
    price_in_dollar_range: Mapped[dict | None] = mapped_column(JSONDocument)
    features: Mapped[dict] = mapped_column(JSONDocument, default=dict, nullable=False)
    development_updates: Mapped[list[dict]] = mapped_column(JSONDocument, default=list, nullable=False)
    payment_plans: Mapped[list[dict]] = mapped_column(JSONDocument, default=list, nullable=False)
    floor_plans: Mapped[list[dict]] = mapped_column(JSONDocument, default=list, nullable=False)
    walkthrough_3d_url: Mapped[str | None] = mapped_column(String)

    contact_phone: Mapped[str | None] = mapped_column(String)
    contact_whatsapp: Mapped[str | None] = mapped_column(String)
    contact_email: Mapped[str | None] = mapped_column(String)

    status: Mapped[ProjectStatus] = mapped_column(
        Enum(ProjectStatus, name="project_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ProjectStatus.UPCOMING,
    )
    created_by: Mapped[str] = mapped_column(String, index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
