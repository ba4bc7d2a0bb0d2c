"""
Pydantic schemas for property requests and responses.
Handles property CRUD payloads and listing responses.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from decimal import Decimal
from estate_api.models.property import PropertyType, ListingType, PropertyStatus


class PropertyFields(BaseModel):
    """Optional listing fields shared by create and update payloads."""

    description: Optional[str] = Field(None, max_length=10000, description="Detailed property description")
    property_type: Optional[PropertyType] = Field(None, description="Kind of building", examples=["house"])
    listing_type: Optional[ListingType] = Field(None, description="Offered for sale or rent", examples=["sale"])
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100, examples=["Austin"])
    state: Optional[str] = Field(None, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)
    bathrooms: Optional[int] = Field(None, ge=0, le=50, description="Number of bathrooms")
    area_sqft: Optional[int] = Field(None, gt=0, le=10000000, description="Area in square feet")
    year_built: Optional[int] = Field(None, ge=1000, le=2100)
    featured: Optional[bool] = Field(None, description="Show the listing in featured sections")
    images: Optional[List[int]] = Field(
        None,
        description="Ids of previously uploaded images to link; the first becomes the primary image",
        examples=[[7, 8]]
    )

    @field_validator('images')
    @classmethod
    def validate_images(cls, v):
        """Reject non-positive ids; order is kept."""
        if v is not None and any(image_id <= 0 for image_id in v):
            raise ValueError("Image ids must be positive integers")
        return v


class PropertyCreate(PropertyFields):
    """Schema for creating a new property."""

    title: str = Field(..., min_length=1, max_length=255, description="Property listing title", examples=["Lake House"])
    price: Decimal = Field(..., gt=0, le=Decimal("9999999999.99"), description="Asking price or monthly rent", examples=[450000])
    bedrooms: Optional[int] = Field(None, ge=0, le=50, description="Number of bedrooms", examples=[3])

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Validate and clean title."""
        if not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()


class PropertyUpdate(PropertyFields):
    """
    Schema for updating an existing property.

    Only fields present in the request body are changed. Sending ``images``
    replaces the whole image set; an empty list unlinks every image.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, gt=0, le=Decimal("9999999999.99"))
    bedrooms: Optional[int] = Field(None, ge=0, le=50)
    status: Optional[PropertyStatus] = Field(None, description="Listing availability")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip() if v else v


class PropertyResponse(BaseModel):
    """Schema for a property with its ordered image ids."""

    id: int
    title: str
    description: Optional[str] = None
    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    price: float
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    bedrooms: int
    bathrooms: int
    area_sqft: Optional[int] = None
    year_built: Optional[int] = None
    status: PropertyStatus
    featured: bool
    agent_id: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    images: List[int] = Field(default_factory=list, description="Image ids, primary first")


class PropertyListResponse(BaseModel):
    properties: List[PropertyResponse]


class PropertyDetailResponse(BaseModel):
    property: PropertyResponse


class PropertyCreatedResponse(BaseModel):
    message: str = "Property created"
    property_id: int


class PropertyUpdatedResponse(BaseModel):
    message: str = "Property updated"
    property: PropertyResponse


class MessageResponse(BaseModel):
    """Plain acknowledgement for update and delete operations."""

    message: str
