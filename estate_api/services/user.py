"""
User management service: listing, profile updates and account removal.
"""

from typing import List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.repositories.user import UserRepository
from estate_api.models.user import User
from estate_api.schemas.user import UserUpdate
from estate_api.utils.exceptions import (
    NotFoundError,
    ValidationError,
    DuplicateEmailError,
    InsufficientPermissionsError
)
import logging

logger = logging.getLogger(__name__)


class UserService:
    """
    Business rules for managing accounts.

    Admins manage every account; other users manage only their own and can
    never change a role.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def list_users(self) -> List[Dict[str, Any]]:
        """All users with the number of listings each owns."""
        return await self.user_repo.list_with_property_counts()

    async def get_user(self, user_id: int) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def update_user(self, user_id: int, update_data: UserUpdate, current_user: User) -> User:
        """
        Apply a partial update to an account.

        Raises:
            InsufficientPermissionsError: If the caller is neither admin nor the account owner,
                or a non-admin tries to change a role
            NotFoundError: If the user does not exist
            DuplicateEmailError: If the new email belongs to another account
        """
        if not current_user.can_manage_user(user_id):
            raise InsufficientPermissionsError("update this user")

        changes = update_data.model_dump(exclude_unset=True)

        if "role" in changes and not current_user.is_admin:
            raise InsufficientPermissionsError("change user roles")

        target_user = await self.get_user(user_id)

        if changes.get("email"):
            try:
                changes["email"] = User.validate_email_format(changes["email"])
            except ValueError as e:
                raise ValidationError(str(e))
            is_available = await self.user_repo.check_email_availability(
                changes["email"], exclude_user_id=user_id
            )
            if not is_available:
                raise DuplicateEmailError(changes["email"])
        elif "email" in changes:
            raise ValidationError("Email cannot be empty")

        if "role" in changes and changes["role"] is None:
            del changes["role"]

        updated_user = await self.user_repo.update(target_user.id, changes)
        logger.info(f"User {user_id} updated by {current_user.email}: {sorted(changes)}")
        return updated_user

    async def delete_user(self, user_id: int, current_user: User) -> None:
        """
        Remove an account along with its favorites and listings.

        Raises:
            InsufficientPermissionsError: If the caller is neither admin nor the account owner
            NotFoundError: If the user does not exist
        """
        if not current_user.can_manage_user(user_id):
            raise InsufficientPermissionsError("delete this user")

        deleted = await self.user_repo.delete_user(user_id)
        if not deleted:
            raise NotFoundError("User", user_id)

        logger.info(f"User {user_id} deleted by {current_user.email}")
