"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import LoginRequest, AuthResponse

# User schemas
from .user import (
    UserCreate,
    UserUpdate,
    UserResponse,
    UserListItem,
    UserListResponse,
    ProfileResponse
)

# Property schemas
from .property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyListResponse,
    PropertyDetailResponse,
    PropertyCreatedResponse,
    PropertyUpdatedResponse,
    MessageResponse
)

# Image schemas
from .image import ImageUploadResponse

# Favorite schemas
from .favorite import (
    FavoriteCreate,
    FavoriteResponse,
    FavoriteCreatedResponse,
    FavoriteSummary,
    FavoriteListResponse,
    FavoriteCheckResponse
)

__all__ = [
    "LoginRequest",
    "AuthResponse",

    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserListItem",
    "UserListResponse",
    "ProfileResponse",

    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "PropertyListResponse",
    "PropertyDetailResponse",
    "PropertyCreatedResponse",
    "PropertyUpdatedResponse",
    "MessageResponse",

    "ImageUploadResponse",

    "FavoriteCreate",
    "FavoriteResponse",
    "FavoriteCreatedResponse",
    "FavoriteSummary",
    "FavoriteListResponse",
    "FavoriteCheckResponse"
]
