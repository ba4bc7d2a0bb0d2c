"""
User model with authentication and role management.
Handles accounts for administrators, listing agents and regular users.
"""

from sqlalchemy import String, Boolean, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from estate_api.database import Base
from passlib.context import CryptContext
from email_validator import validate_email, EmailNotValidError
import enum
from typing import Optional

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    ADMIN = "admin"
    AGENT = "agent"
    USER = "user"


class User(Base):
    """
    User model for authentication and authorization.
    Agents own property listings; admins can manage every listing and account.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - must be unique and valid"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    full_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="User's full name"
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True
    )

    profile_image: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="URL or path of the user's avatar"
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.USER,
        index=True,
        comment="User role for access control"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Whether the user account is active"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized, lower-cased email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email, check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    @classmethod
    def hash_password(cls, password: str) -> str:
        """
        Hash a password using bcrypt.

        Raises:
            ValueError: If the password is shorter than 6 characters
        """
        if not password or len(password) < 6:
            raise ValueError("Password must be at least 6 characters long")

        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return pwd_context.verify(password, self.hashed_password)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_agent(self) -> bool:
        return self.role == UserRole.AGENT

    def can_manage_property(self, property_agent_id: int) -> bool:
        """
        Check if user can manage a specific property.

        Admins can manage all properties, agents only their own.
        """
        if self.is_admin:
            return True

        return self.is_agent and self.id == property_agent_id

    def can_manage_user(self, user_id: int) -> bool:
        """Admins manage every account, everyone else only their own."""
        return self.is_admin or self.id == user_id

    def to_dict(self) -> dict:
        """
        Convert user to dictionary (excluding sensitive data).
        """
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "phone": self.phone,
            "role": self.role.value,
            "profile_image": self.profile_image,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
