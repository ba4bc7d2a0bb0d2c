"""
User repository for authentication and user management operations.
Provides secure user operations with password handling and account cleanup.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from estate_api.repositories.base import BaseRepository
from estate_api.repositories.image import ImageRepository
from estate_api.models.user import User, UserRole
from estate_api.models.property import Property
from estate_api.models.favorite import Favorite
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management with authentication support.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: email, password
                      Optional: full_name, phone, role (defaults to USER)

        Raises:
            ValueError: If validation fails or the email is taken
        """
        user_data = dict(user_data)
        email = User.validate_email_format(user_data["email"])

        existing_user = await self.get_by_email(email)
        if existing_user:
            raise ValueError(f"User with email {email} already exists")

        password = user_data.pop("password")
        create_data = {
            **user_data,
            "email": email,
            "hashed_password": User.hash_password(password),
            "role": user_data.get("role") or UserRole.USER,
            "is_active": user_data.get("is_active", True)
        }

        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Returns:
            User instance if found, None otherwise
        """
        normalized_email = email.lower().strip()

        query = select(User).where(User.email == normalized_email)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Returns:
            User instance if authentication successful, None otherwise
        """
        user = await self.get_by_email(email)

        if not user:
            logger.debug(f"Authentication failed: user {email} not found")
            return None

        if not user.is_active:
            logger.debug(f"Authentication failed: user {email} is inactive")
            return None

        if not user.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        return user

    async def check_email_availability(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        """
        Check whether an email address is free to use.

        Args:
            email: Email to check
            exclude_user_id: User allowed to already own the address
        """
        query = select(User.id).where(User.email == email.lower().strip())
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        result = await self.db.execute(query)
        return result.first() is None

    async def list_with_property_counts(self) -> List[Dict[str, Any]]:
        """
        List all users, newest first, with the number of listings each owns.
        """
        property_count = func.count(Property.id).label("property_count")
        query = (
            select(User, property_count)
            .outerjoin(Property, Property.agent_id == User.id)
            .group_by(User.id)
            .order_by(User.created_at.desc(), User.id.desc())
        )
        result = await self.db.execute(query)

        users = []
        for user, count in result.all():
            entry = user.to_dict()
            entry["property_count"] = count
            users.append(entry)
        return users

    async def delete_user(self, user_id: int) -> bool:
        """
        Delete a user along with their favorites and listings.

        Images of the removed listings are unlinked, not deleted. Everything
        commits as one transaction.

        Returns:
            True if the user existed and was deleted
        """
        if not await self.exists(user_id):
            return False

        image_repo = ImageRepository(self.db)
        try:
            result = await self.db.execute(select(Property.id).where(Property.agent_id == user_id))
            property_ids = list(result.scalars().all())

            await self.db.execute(delete(Favorite).where(Favorite.user_id == user_id))
            if property_ids:
                await self.db.execute(delete(Favorite).where(Favorite.property_id.in_(property_ids)))
                for property_id in property_ids:
                    await image_repo.unlink_property(property_id, commit=False)
                await self.db.execute(
                    delete(Property)
                    .where(Property.id.in_(property_ids))
                    .execution_options(synchronize_session=False)
                )
            await self.db.execute(
                delete(User)
                .where(User.id == user_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete user {user_id}: {e}")
            raise

        logger.info(f"Deleted user {user_id} and {len(property_ids)} listings")
        return True
