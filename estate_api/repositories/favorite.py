"""
Favorite repository for user bookmarks of properties.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.dialects import postgresql, sqlite
from estate_api.repositories.base import BaseRepository
from estate_api.models.favorite import Favorite
from estate_api.models.property import Property
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class FavoriteRepository(BaseRepository[Favorite]):
    """Repository for favorites, unique per (user, property)."""

    def __init__(self, db: AsyncSession):
        super().__init__(Favorite, db)

    async def add_if_absent(self, user_id: int, property_id: int) -> Optional[int]:
        """
        Insert a favorite unless the pair already exists.

        A single INSERT ... ON CONFLICT DO NOTHING against the
        (user_id, property_id) unique constraint, so concurrent identical
        requests cannot both succeed.

        Returns:
            Id of the new favorite, or None if it already existed
        """
        insert = _INSERT_BY_DIALECT.get(self.dialect_name)
        if insert is None:
            raise NotImplementedError(f"Unsupported database dialect: {self.dialect_name}")

        stmt = (
            insert(Favorite)
            .values(user_id=user_id, property_id=property_id)
            .on_conflict_do_nothing(index_elements=["user_id", "property_id"])
            .returning(Favorite.id)
        )
        try:
            result = await self.db.execute(stmt)
            favorite_id = result.scalar_one_or_none()
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to add favorite user={user_id} property={property_id}: {e}")
            raise

        if favorite_id is None:
            logger.debug(f"Favorite user={user_id} property={property_id} already exists")
        else:
            logger.info(f"Added favorite {favorite_id} user={user_id} property={property_id}")
        return favorite_id

    async def remove(self, user_id: int, property_id: int) -> bool:
        """
        Delete the user's favorite for a property.

        Returns:
            True if a row was deleted
        """
        stmt = (
            delete(Favorite)
            .where(Favorite.user_id == user_id, Favorite.property_id == property_id)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to remove favorite user={user_id} property={property_id}: {e}")
            raise

        return result.rowcount > 0

    async def is_favorited(self, user_id: int, property_id: int) -> bool:
        query = select(Favorite.id).where(
            Favorite.user_id == user_id,
            Favorite.property_id == property_id
        )
        result = await self.db.execute(query)
        return result.first() is not None

    async def list_for_user(self, user_id: int) -> List[Dict[str, Any]]:
        """
        Get the user's favorites joined with property summary fields, newest first.
        """
        query = (
            select(
                Favorite.id,
                Favorite.property_id,
                Favorite.created_at,
                Property.title,
                Property.price,
                Property.address,
                Property.city,
                Property.state,
                Property.property_type,
                Property.bedrooms,
                Property.bathrooms,
                Property.area_sqft,
                Property.status,
                Property.featured,
            )
            .join(Property, Favorite.property_id == Property.id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        )
        result = await self.db.execute(query)

        favorites = []
        for row in result.all():
            favorite = dict(row._mapping)
            favorite["price"] = float(favorite["price"])
            favorite["property_type"] = favorite["property_type"].value if favorite["property_type"] else None
            favorite["status"] = favorite["status"].value
            favorite["created_at"] = favorite["created_at"].isoformat() if favorite["created_at"] else None
            favorites.append(favorite)
        return favorites
