"""
Repository layer for data access operations.
Each repository wraps one AsyncSession injected per request.
"""

from estate_api.repositories.base import BaseRepository
from estate_api.repositories.property import PropertyRepository, PropertySearchFilters
from estate_api.repositories.image import ImageRepository
from estate_api.repositories.favorite import FavoriteRepository
from estate_api.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "ImageRepository",
    "FavoriteRepository",
    "UserRepository"
]
