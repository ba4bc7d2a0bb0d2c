"""
Property service for managing property listings with business logic validation.
Handles CRUD operations, ownership validation and search.
"""

from typing import List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.repositories.property import PropertyRepository, PropertySearchFilters
from estate_api.models.property import Property
from estate_api.models.user import User
from estate_api.schemas.property import PropertyCreate, PropertyUpdate
from estate_api.utils.exceptions import (
    ValidationError,
    PropertyNotFoundError,
    PropertyOwnershipError,
    InsufficientPermissionsError
)
import logging

logger = logging.getLogger(__name__)

# Columns that cannot be set to NULL through an update
NON_NULLABLE_FIELDS = ("title", "price", "country", "bedrooms", "bathrooms", "status", "featured")


class PropertyService:
    """
    Property service for managing property listings.

    Agents and admins create listings; an agent may only change or remove the
    listings they own, admins may change any.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)

    async def create_property(self, property_data: PropertyCreate, current_user: User) -> Property:
        """
        Create a new property listing owned by the current user.

        Images listed in ``property_data.images`` are linked in the same
        transaction as the insert.

        Raises:
            InsufficientPermissionsError: If the user is neither agent nor admin
            ValidationError: If property data is invalid
        """
        if not (current_user.is_admin or current_user.is_agent):
            raise InsufficientPermissionsError("create properties")

        create_data = property_data.model_dump(exclude={"images"}, exclude_none=True)
        create_data["agent_id"] = current_user.id

        try:
            property_obj = await self.property_repo.create_property(
                create_data,
                image_ids=property_data.images
            )
        except ValueError as e:
            raise ValidationError(str(e))

        logger.info(
            f"Property created by user {current_user.email}: {property_obj.title} "
            f"(ID: {property_obj.id}, images: {property_data.images or []})"
        )
        return property_obj

    async def get_property(self, property_id: int) -> Dict[str, Any]:
        """
        Get a property with its ordered image ids.

        Raises:
            PropertyNotFoundError: If property doesn't exist
        """
        property_dict = await self.property_repo.get_property_with_images(property_id)
        if property_dict is None:
            raise PropertyNotFoundError(property_id)
        return property_dict

    async def search_properties(self, filters: PropertySearchFilters) -> List[Dict[str, Any]]:
        return await self.property_repo.search_properties(filters)

    async def update_property(
        self,
        property_id: int,
        property_data: PropertyUpdate,
        current_user: User
    ) -> Property:
        """
        Apply a partial update; only fields present in the request change.

        When ``images`` is supplied the whole image set is replaced in the same
        transaction as the field update.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If the caller may not manage this property
            ValidationError: If update data is invalid
        """
        existing_property = await self.property_repo.get_by_id(property_id)
        if existing_property is None:
            raise PropertyNotFoundError(property_id)

        self._check_ownership(existing_property, current_user)

        changes = property_data.model_dump(exclude_unset=True, exclude={"images"})
        null_fields = [field for field in NON_NULLABLE_FIELDS if field in changes and changes[field] is None]
        if null_fields:
            raise ValidationError(f"Fields cannot be null: {', '.join(null_fields)}")

        try:
            property_obj = await self.property_repo.update_property(
                property_id,
                changes,
                image_ids=property_data.images
            )
        except ValueError as e:
            raise ValidationError(str(e))

        if property_obj is None:
            raise PropertyNotFoundError(property_id)

        logger.info(f"Property {property_id} updated by {current_user.email}: {sorted(changes)}")
        return property_obj

    async def delete_property(self, property_id: int, current_user: User) -> None:
        """
        Delete a property, its favorites, and release its images.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If the caller may not manage this property
        """
        existing_property = await self.property_repo.get_by_id(property_id)
        if existing_property is None:
            raise PropertyNotFoundError(property_id)

        self._check_ownership(existing_property, current_user)

        deleted = await self.property_repo.delete_property(property_id)
        if not deleted:
            raise PropertyNotFoundError(property_id)

        logger.info(f"Property {property_id} deleted by {current_user.email}")

    def _check_ownership(self, property_obj: Property, current_user: User) -> None:
        if not current_user.can_manage_property(property_obj.agent_id):
            logger.warning(
                f"User {current_user.id} denied access to property {property_obj.id} "
                f"owned by agent {property_obj.agent_id}"
            )
            raise PropertyOwnershipError()
