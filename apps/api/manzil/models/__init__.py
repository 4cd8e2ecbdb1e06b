"""Expose ORM models."""
from .counter import IdCounter
from .listing import Listing
from .project import Project
from .user import AuthToken, User

__all__ = [
    "AuthToken",
    "IdCounter",
    "Listing",
    "Project",
    "User",
]
