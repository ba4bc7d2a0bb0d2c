"""
Repository for PropertyImage operations.
Stores uploaded payloads and maintains the image-to-property association.
"""

from typing import Dict, List, Optional, Tuple, Any
from sqlalchemy import select, update, case
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from estate_api.models.image import PropertyImage
from estate_api.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ImageRepository(BaseRepository[PropertyImage]):
    """
    Repository for PropertyImage database operations.

    The association methods take a ``commit`` flag so callers can compose
    them with other writes into a single transaction.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(PropertyImage, db)

    async def store_unattached(self, payloads: List[Dict[str, Any]]) -> List[PropertyImage]:
        """
        Insert images with no property association.

        Args:
            payloads: Column values per image (image_data, mime_type, file_size, ...)

        Returns:
            Created images, in the order given
        """
        images = [
            PropertyImage(**payload, property_id=None, is_primary=False, display_order=0)
            for payload in payloads
        ]
        try:
            self.db.add_all(images)
            await self.db.flush()
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to store {len(images)} images: {e}")
            raise

        logger.info(f"Stored {len(images)} unattached images: {[image.id for image in images]}")
        return images

    async def link_to_property(
        self,
        property_id: int,
        image_ids: List[int],
        commit: bool = True
    ) -> None:
        """
        Associate images with a property, overwriting any prior association.

        Ids that match no stored image are ignored. Of the remaining ids the
        first becomes the primary image and list order becomes the gallery
        order.
        """
        if not image_ids:
            return

        result = await self.db.execute(
            select(PropertyImage.id).where(PropertyImage.id.in_(set(image_ids)))
        )
        stored = set(result.scalars().all())

        positions: Dict[int, int] = {}
        for image_id in image_ids:
            if image_id in stored and image_id not in positions:
                positions[image_id] = len(positions)

        if not positions:
            logger.debug(f"No stored images among {image_ids} for property {property_id}")
        else:
            primary_id = next(iter(positions))
            stmt = (
                update(PropertyImage)
                .where(PropertyImage.id.in_(list(positions)))
                .values(
                    property_id=property_id,
                    display_order=case(positions, value=PropertyImage.id, else_=0),
                    is_primary=case((PropertyImage.id == primary_id, True), else_=False),
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(stmt)
            logger.debug(f"Linked images {list(positions)} to property {property_id}")

        if commit:
            await self.db.commit()

    async def unlink_property(self, property_id: int, commit: bool = True) -> None:
        """Clear the association of every image linked to a property."""
        stmt = (
            update(PropertyImage)
            .where(PropertyImage.property_id == property_id)
            .values(property_id=None, is_primary=False, display_order=0)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)

        if commit:
            await self.db.commit()
        logger.debug(f"Unlinked all images from property {property_id}")

    async def replace_links(self, property_id: int, image_ids: List[int], commit: bool = True) -> None:
        """
        Replace the image set of a property.

        The unlink and relink land in one transaction; with commit=False it is
        the caller's.
        """
        try:
            await self.unlink_property(property_id, commit=False)
            await self.link_to_property(property_id, image_ids, commit=False)
            if commit:
                await self.db.commit()
        except Exception as e:
            if commit:
                await self.db.rollback()
            logger.error(f"Failed to replace images of property {property_id}: {e}")
            raise

    async def get_image_ids(self, property_ids: List[int]) -> Dict[int, List[int]]:
        """
        Get the ordered image ids for each of the given properties.

        Returns:
            Mapping of property id to image ids in gallery order; properties
            without images map to an empty list
        """
        image_map: Dict[int, List[int]] = {property_id: [] for property_id in property_ids}
        if not property_ids:
            return image_map

        query = (
            select(PropertyImage.property_id, PropertyImage.id)
            .where(PropertyImage.property_id.in_(property_ids))
            .order_by(
                PropertyImage.property_id,
                PropertyImage.display_order.asc(),
                PropertyImage.id.asc()
            )
        )
        result = await self.db.execute(query)

        for property_id, image_id in result.all():
            image_map.setdefault(property_id, []).append(image_id)

        return image_map

    async def get_payload(self, image_id: int) -> Optional[Tuple[Optional[bytes], Optional[str]]]:
        """
        Get the stored bytes and MIME type of an image.

        Returns:
            (image_data, mime_type) or None if no such image exists
        """
        query = select(PropertyImage.image_data, PropertyImage.mime_type).where(
            PropertyImage.id == image_id
        )
        result = await self.db.execute(query)
        row = result.first()
        if row is None:
            return None
        return row.image_data, row.mime_type
