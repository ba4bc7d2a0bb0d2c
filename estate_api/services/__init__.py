"""
Service layer for business logic implementation.
Contains services for authentication, users, properties, images, favorites and error handling.
"""

from .auth import AuthService
from .user import UserService
from .property import PropertyService
from .image import ImageService
from .favorite import FavoriteService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "UserService",
    "PropertyService",
    "ImageService",
    "FavoriteService",
    "ErrorHandlerService"
]
