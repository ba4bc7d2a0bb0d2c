"""
Authentication service for registration, login and token-based identity.
Handles JWT token generation and validation and turns repository results into API errors.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.config import settings
from estate_api.repositories.user import UserRepository
from estate_api.models.user import User, UserRole
from estate_api.schemas.user import UserCreate
from estate_api.utils.auth import create_access_token, verify_token
from estate_api.utils.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    ValidationError,
    DuplicateEmailError
)
from jose import JWTError, ExpiredSignatureError
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing registration, login and bearer tokens.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    @property
    def expires_in(self) -> int:
        """Access token lifetime in seconds."""
        return settings.access_token_expire_minutes * 60

    def create_token(self, user: User) -> str:
        return create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role
        )

    async def register(self, user_data: UserCreate) -> Tuple[User, str]:
        """
        Create a new account and sign it in.

        Args:
            user_data: Registration payload; role defaults to user

        Returns:
            Tuple of (user, access_token)

        Raises:
            DuplicateEmailError: If the email is already registered
            ValidationError: If the email or password is rejected
        """
        is_available = await self.user_repo.check_email_availability(user_data.email)
        if not is_available:
            raise DuplicateEmailError(user_data.email)

        create_data = user_data.model_dump()
        create_data["role"] = user_data.role or UserRole.USER

        try:
            user = await self.user_repo.create_user(create_data)
        except ValueError as e:
            if "already exists" in str(e):
                raise DuplicateEmailError(user_data.email)
            raise ValidationError(str(e))

        logger.info(f"User registered: {user.email} (ID: {user.id}, role: {user.role.value})")
        return user, self.create_token(user)

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Raises:
            InvalidCredentialsError: If credentials are invalid or the account is inactive
        """
        if not email or not email.strip():
            raise ValidationError("Email is required")

        if not password:
            raise ValidationError("Password is required")

        user = await self.user_repo.authenticate_user(email, password)

        if not user:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Authenticate user and create an access token.

        Returns:
            Tuple of (user, access_token)
        """
        user = await self.authenticate_user(email, password)
        return user, self.create_token(user)

    async def get_current_user(self, token: str) -> User:
        """
        Get current user from access token.

        Args:
            token: JWT access token

        Returns:
            Current User object

        Raises:
            InvalidTokenError: If the token is invalid or its user no longer exists
            TokenExpiredError: If the token is expired
            InactiveUserError: If user account is inactive
        """
        try:
            token_payload = verify_token(token, token_type="access")
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            raise InvalidTokenError(str(e))

        user = await self.user_repo.get_by_id(token_payload.user_id)
        if user is None:
            raise InvalidTokenError("User for this token no longer exists")

        if not user.is_active:
            raise InactiveUserError()

        return user
