"""Profiles concept: genres and reading history per user."""

from .models import PROFILES_COLLECTION, Profile
from .service import ProfilesService


__all__ = [
    "PROFILES_COLLECTION",
    "Profile",
    "ProfilesService",
]
