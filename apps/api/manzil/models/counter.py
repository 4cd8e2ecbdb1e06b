"""Sequential ID counter model."""
from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class IdCounter(Base):
    """Last number handed out for a human-readable ID prefix."""

    __tablename__ = "id_counters"

    prefix: Mapped[str] = mapped_column(String, primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False)
