"""
Favorites API endpoints. Every route acts on the authenticated user's own favorites.
"""

from fastapi import APIRouter, Depends, status, Path

from estate_api.models.user import User
from estate_api.services.favorite import FavoriteService
from estate_api.schemas.favorite import (
    FavoriteCreate,
    FavoriteCreatedResponse,
    FavoriteListResponse,
    FavoriteCheckResponse
)
from estate_api.schemas.property import MessageResponse
from estate_api.schemas.error import get_error_responses
from estate_api.utils.dependencies import get_current_active_user, get_favorite_service


router = APIRouter(prefix="/favorites", tags=["Favorites"])


@router.get(
    "",
    response_model=FavoriteListResponse,
    summary="List favorites",
    description="The current user's favorites with property summary fields, newest first",
    responses=get_error_responses(401)
)
async def list_favorites(
    current_user: User = Depends(get_current_active_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteListResponse:
    favorites = await favorite_service.list_favorites(current_user)
    return FavoriteListResponse(favorites=favorites)


@router.post(
    "",
    response_model=FavoriteCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add favorite",
    responses=get_error_responses(400, 401, 404)
)
async def add_favorite(
    favorite_data: FavoriteCreate,
    current_user: User = Depends(get_current_active_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteCreatedResponse:
    """
    Bookmark a property.

    Raises:
        PropertyNotFoundError: If the property does not exist
        DuplicateFavoriteError: If the property is already a favorite (400)
    """
    favorite = await favorite_service.add_favorite(favorite_data.property_id, current_user)
    return FavoriteCreatedResponse(favorite=favorite)


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Remove favorite",
    responses=get_error_responses(400, 401, 404)
)
async def remove_favorite(
    property_id: int = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_active_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> MessageResponse:
    await favorite_service.remove_favorite(property_id, current_user)
    return MessageResponse(message="Property removed from favorites")


@router.get(
    "/check/{property_id}",
    response_model=FavoriteCheckResponse,
    summary="Check favorite",
    responses=get_error_responses(400, 401)
)
async def check_favorite(
    property_id: int = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_active_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteCheckResponse:
    is_favorited = await favorite_service.is_favorited(property_id, current_user)
    return FavoriteCheckResponse(is_favorited=is_favorited)
