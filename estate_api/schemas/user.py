"""
Pydantic schemas for user requests and responses.
Handles registration, profile updates and user listings.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from estate_api.models.user import UserRole


class UserCreate(BaseModel):
    """Schema for self-registration."""

    email: EmailStr = Field(..., description="User's email address", examples=["agent@example.com"])
    password: str = Field(..., min_length=6, max_length=72, description="Password (6 to 72 characters)")
    full_name: Optional[str] = Field(None, max_length=255, examples=["Jane Doe"])
    phone: Optional[str] = Field(None, max_length=50)
    role: Optional[UserRole] = Field(
        UserRole.USER,
        description="Requested role; admin cannot be self-assigned"
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if v == UserRole.ADMIN:
            raise ValueError("Admin role cannot be self-assigned")
        return v


class UserUpdate(BaseModel):
    """Schema for updating a user; only supplied fields change."""

    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    role: Optional[UserRole] = Field(None, description="User's role (admin only)")
    profile_image: Optional[str] = Field(None, max_length=500)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip() if v else v


class UserResponse(BaseModel):
    """Public user representation (no password hash)."""

    id: int
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
    profile_image: Optional[str] = None
    is_active: bool
    created_at: Optional[str] = None


class UserListItem(UserResponse):
    property_count: int = Field(0, description="Number of listings the user owns")


class UserListResponse(BaseModel):
    users: List[UserListItem]


class ProfileResponse(BaseModel):
    user: UserResponse
