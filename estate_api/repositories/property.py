"""
Property repository for managing listings with filtered search.
Composes the search query from a typed filter object and keeps image
associations in the same unit of work as listing writes.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_, desc
from estate_api.repositories.base import BaseRepository
from estate_api.repositories.image import ImageRepository
from estate_api.models.property import Property, PropertyType, ListingType, PropertyStatus
from estate_api.models.favorite import Favorite
from typing import Optional, List, Dict, Any
from decimal import Decimal
import logging

logger = logging.getLogger(__name__)


class PropertySearchFilters:
    """
    Recognized property search filters.

    Every attribute left as None imposes no constraint. Price and room
    filters are inclusive lower/upper bounds; city is a case-insensitive
    substring match.
    """

    def __init__(
        self,
        property_type: Optional[PropertyType] = None,
        listing_type: Optional[ListingType] = None,
        city: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        status: Optional[PropertyStatus] = None,
        bedrooms: Optional[int] = None,
        bathrooms: Optional[int] = None,
        featured: Optional[bool] = None,
        agent_id: Optional[int] = None
    ):
        self.property_type = property_type
        self.listing_type = listing_type
        self.city = city
        self.min_price = min_price
        self.max_price = max_price
        self.status = status
        self.bedrooms = bedrooms
        self.bathrooms = bathrooms
        self.featured = featured
        self.agent_id = agent_id

    def __repr__(self) -> str:
        active = {key: value for key, value in vars(self).items() if value is not None}
        return f"<PropertySearchFilters({active})>"


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings.
    Search results and single-property reads carry their ordered image ids.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)
        self.image_repo = ImageRepository(db)

    async def create_property(
        self,
        property_data: Dict[str, Any],
        image_ids: Optional[List[int]] = None
    ) -> Property:
        """
        Create a property and link pre-uploaded images in one transaction.

        Raises:
            ValueError: If property validation fails
        """
        property_obj = Property(**property_data)
        property_obj.validate_all()

        try:
            self.db.add(property_obj)
            await self.db.flush()
            if image_ids:
                await self.image_repo.link_to_property(property_obj.id, image_ids, commit=False)
            await self.db.commit()
            await self.db.refresh(property_obj)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create property: {e}")
            raise

        logger.info(f"Created property: {property_obj.title} (ID: {property_obj.id})")
        return property_obj

    async def update_property(
        self,
        property_id: int,
        property_data: Dict[str, Any],
        image_ids: Optional[List[int]] = None
    ) -> Optional[Property]:
        """
        Update listing fields and, when image_ids is given, replace the image set.

        The field update, unlink and relink commit together.

        Returns:
            Updated property, or None if it does not exist
        """
        property_obj = await self.get_by_id(property_id)
        if property_obj is None:
            return None

        try:
            self.apply_changes(property_obj, property_data)
            property_obj.validate_all()
            if image_ids is not None:
                await self.image_repo.replace_links(property_id, image_ids, commit=False)
            await self.db.commit()
            await self.db.refresh(property_obj)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update property {property_id}: {e}")
            raise

        logger.info(f"Updated property {property_id}")
        return property_obj

    async def delete_property(self, property_id: int) -> bool:
        """
        Delete a property, its favorites, and release its images.

        Images are unlinked rather than deleted so their ids stay valid.

        Returns:
            True if the property existed and was deleted
        """
        if not await self.exists(property_id):
            return False

        try:
            await self.db.execute(delete(Favorite).where(Favorite.property_id == property_id))
            await self.image_repo.unlink_property(property_id, commit=False)
            await self.db.execute(
                delete(Property)
                .where(Property.id == property_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete property {property_id}: {e}")
            raise

        logger.info(f"Deleted property {property_id}")
        return True

    async def get_property_with_images(self, property_id: int) -> Optional[Dict[str, Any]]:
        """
        Get a property as a dictionary including its ordered image ids.

        Returns:
            Property dictionary or None if not found
        """
        property_obj = await self.get_by_id(property_id)
        if property_obj is None:
            return None

        image_map = await self.image_repo.get_image_ids([property_obj.id])
        return property_obj.to_dict(images=image_map[property_obj.id])

    async def search_properties(self, filters: PropertySearchFilters) -> List[Dict[str, Any]]:
        """
        Search properties matching every supplied filter.

        Args:
            filters: PropertySearchFilters instance with search criteria

        Returns:
            Property dictionaries, newest first, each with its image ids
        """
        query = select(Property)

        conditions = self._build_filter_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        query = query.order_by(desc(Property.created_at), desc(Property.id))

        result = await self.db.execute(query)
        properties = list(result.scalars().all())

        image_map = await self.image_repo.get_image_ids([p.id for p in properties])

        logger.debug(f"Property search {filters!r} returned {len(properties)} results")
        return [p.to_dict(images=image_map.get(p.id, [])) for p in properties]

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.

        Returns:
            List of SQLAlchemy conditions, one per supplied filter
        """
        conditions = []

        if filters.property_type is not None:
            conditions.append(Property.property_type == filters.property_type)

        if filters.listing_type is not None:
            conditions.append(Property.listing_type == filters.listing_type)

        # Case-insensitive substring; wildcards in the value match literally
        if filters.city:
            conditions.append(Property.city.icontains(filters.city, autoescape=True))

        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        if filters.status is not None:
            conditions.append(Property.status == filters.status)

        # Room filters are minimums
        if filters.bedrooms is not None:
            conditions.append(Property.bedrooms >= filters.bedrooms)
        if filters.bathrooms is not None:
            conditions.append(Property.bathrooms >= filters.bathrooms)

        if filters.featured is not None:
            conditions.append(Property.featured == filters.featured)

        if filters.agent_id is not None:
            conditions.append(Property.agent_id == filters.agent_id)

        return conditions
