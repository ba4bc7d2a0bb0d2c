"""
Database models for the Real Estate Listings API.
Includes User, Property, PropertyImage and Favorite models.
"""

from estate_api.models.user import User, UserRole
from estate_api.models.property import Property, PropertyType, ListingType, PropertyStatus
from estate_api.models.image import PropertyImage
from estate_api.models.favorite import Favorite

__all__ = [
    "User",
    "UserRole",
    "Property",
    "PropertyType",
    "ListingType",
    "PropertyStatus",
    "PropertyImage",
    "Favorite",
]
