"""
Favorite service: per-user bookmarks of property listings.
"""

from typing import List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.repositories.favorite import FavoriteRepository
from estate_api.repositories.property import PropertyRepository
from estate_api.models.user import User
from estate_api.utils.exceptions import (
    PropertyNotFoundError,
    FavoriteNotFoundError,
    DuplicateFavoriteError
)
import logging

logger = logging.getLogger(__name__)


class FavoriteService:
    """Favorites are created and removed only by the user who owns them."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.favorite_repo = FavoriteRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def list_favorites(self, current_user: User) -> List[Dict[str, Any]]:
        return await self.favorite_repo.list_for_user(current_user.id)

    async def add_favorite(self, property_id: int, current_user: User) -> Dict[str, int]:
        """
        Bookmark a property for the current user.

        Returns:
            The new favorite as {id, user_id, property_id}

        Raises:
            PropertyNotFoundError: If the property does not exist
            DuplicateFavoriteError: If the property is already bookmarked
        """
        if not await self.property_repo.exists(property_id):
            raise PropertyNotFoundError(property_id)

        favorite_id = await self.favorite_repo.add_if_absent(current_user.id, property_id)
        if favorite_id is None:
            logger.warning(f"User {current_user.id} re-added favorite property {property_id}")
            raise DuplicateFavoriteError()

        return {
            "id": favorite_id,
            "user_id": current_user.id,
            "property_id": property_id,
        }

    async def remove_favorite(self, property_id: int, current_user: User) -> None:
        """
        Raises:
            FavoriteNotFoundError: If the user has not bookmarked the property
        """
        removed = await self.favorite_repo.remove(current_user.id, property_id)
        if not removed:
            raise FavoriteNotFoundError()
        logger.info(f"User {current_user.id} removed favorite property {property_id}")

    async def is_favorited(self, property_id: int, current_user: User) -> bool:
        return await self.favorite_repo.is_favorited(current_user.id, property_id)
