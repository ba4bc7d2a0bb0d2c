"""
FastAPI dependency injection utilities for authentication and services.
Provides reusable dependencies for route protection and user extraction.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.database import get_db
from estate_api.models.user import User, UserRole
from estate_api.services.auth import AuthService
from estate_api.services.user import UserService
from estate_api.services.property import PropertyService
from estate_api.services.image import ImageService
from estate_api.services.favorite import FavoriteService
from estate_api.utils.exceptions import (
    UnauthorizedError,
    InactiveUserError,
    InsufficientPermissionsError
)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session

    Returns:
        AuthService instance
    """
    return AuthService(db)


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


async def get_property_service(db: AsyncSession = Depends(get_db)) -> PropertyService:
    """
    Get property service instance.

    Args:
        db: Database session

    Returns:
        PropertyService instance
    """
    return PropertyService(db)


async def get_image_service(db: AsyncSession = Depends(get_db)) -> ImageService:
    return ImageService(db)


async def get_favorite_service(db: AsyncSession = Depends(get_db)) -> FavoriteService:
    return FavoriteService(db)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Current User object

    Raises:
        UnauthorizedError: If no token provided or token is invalid
        TokenExpiredError: If token is expired
        InactiveUserError: If user account is inactive
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return await auth_service.get_current_user(credentials.credentials)


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current active user (additional check for user status).

    Raises:
        InactiveUserError: If user account is inactive
    """
    if not current_user.is_active:
        raise InactiveUserError()

    return current_user


def require_roles(*roles: UserRole):
    """
    Create a dependency that admits only users holding one of the given roles.

    Args:
        roles: Allowed user roles

    Returns:
        Dependency function resolving to the current user
    """
    allowed = set(roles)
    description = " or ".join(role.value for role in roles)

    async def role_dependency(
        current_user: User = Depends(get_current_active_user)
    ) -> User:
        if current_user.role not in allowed:
            raise InsufficientPermissionsError(f"access {description} resources")
        return current_user

    return role_dependency


# Listing management is open to agents and admins
get_current_agent_user = require_roles(UserRole.AGENT, UserRole.ADMIN)
