"""
Pydantic schemas for favorites.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from estate_api.models.property import PropertyType, PropertyStatus


class FavoriteCreate(BaseModel):
    property_id: int = Field(..., gt=0, description="Property to bookmark")


class FavoriteResponse(BaseModel):
    id: int
    user_id: int
    property_id: int


class FavoriteCreatedResponse(BaseModel):
    message: str = "Property added to favorites"
    favorite: FavoriteResponse


class FavoriteSummary(BaseModel):
    """A favorite joined with the bookmarked property's summary fields."""

    id: int
    property_id: int
    created_at: Optional[str] = None
    title: str
    price: float
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    property_type: Optional[PropertyType] = None
    bedrooms: int
    bathrooms: int
    area_sqft: Optional[int] = None
    status: PropertyStatus
    featured: bool


class FavoriteListResponse(BaseModel):
    favorites: List[FavoriteSummary]


class FavoriteCheckResponse(BaseModel):
    is_favorited: bool
