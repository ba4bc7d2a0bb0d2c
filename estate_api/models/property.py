"""
Property model for sale and rental listings.
Handles listing data with address, pricing, status and agent ownership.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, Enum as SQLEnum, Index, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from estate_api.database import Base
from decimal import Decimal
import enum
from typing import List, Optional


def _enum_values(enum_cls) -> List[str]:
    return [member.value for member in enum_cls]


class PropertyType(str, enum.Enum):
    """Kind of building being listed."""
    HOUSE = "house"
    APARTMENT = "apartment"
    CONDO = "condo"
    VILLA = "villa"
    TOWNHOUSE = "townhouse"
    LAND = "land"
    COMMERCIAL = "commercial"


class ListingType(str, enum.Enum):
    """Whether the property is offered for sale or for rent."""
    SALE = "sale"
    RENT = "rent"


class PropertyStatus(str, enum.Enum):
    """Availability status of a listing."""
    AVAILABLE = "available"
    PENDING = "pending"
    SOLD = "sold"
    RENTED = "rented"


class Property(Base):
    """
    Property model for managing sale and rental listings.
    Images are associated through property_images.property_id and are
    loaded as plain id lists by the image repository.
    """

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Property listing title"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    property_type: Mapped[Optional[PropertyType]] = mapped_column(
        SQLEnum(PropertyType, name="property_type", values_callable=_enum_values),
        nullable=True,
        index=True
    )

    listing_type: Mapped[Optional[ListingType]] = mapped_column(
        SQLEnum(ListingType, name="listing_type", values_callable=_enum_values),
        nullable=True
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True,
        comment="Asking price or monthly rent"
    )

    # Address
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    country: Mapped[str] = mapped_column(String(100), nullable=False, default="USA")

    # Specifications
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    area_sqft: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    year_built: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus, name="property_status", values_callable=_enum_values),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
        index=True
    )

    featured: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True
    )

    agent_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the agent who owns this listing"
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title[:30]}, price={self.price})>"

    def validate_price(self) -> None:
        """
        Validate property price.

        Raises:
            ValueError: If price is invalid
        """
        if self.price is None or self.price <= 0:
            raise ValueError("Property price must be greater than 0")

        if self.price > Decimal('9999999999.99'):
            raise ValueError("Property price exceeds maximum allowed value")

    def validate_rooms(self) -> None:
        if (self.bedrooms or 0) < 0 or (self.bathrooms or 0) < 0:
            raise ValueError("Room counts cannot be negative")

    def validate_all(self) -> None:
        """Run all validation checks on the property."""
        self.validate_price()
        self.validate_rooms()

    def to_dict(self, images: Optional[List[int]] = None) -> dict:
        """
        Convert property to dictionary.

        Args:
            images: Ordered image ids associated with the property

        Returns:
            Dictionary representation of property
        """
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "property_type": self.property_type.value if self.property_type else None,
            "listing_type": self.listing_type.value if self.listing_type else None,
            "price": float(self.price),
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "area_sqft": self.area_sqft,
            "year_built": self.year_built,
            "status": self.status.value,
            "featured": self.featured,
            "agent_id": self.agent_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "images": list(images or []),
        }


# Composite index for the most common search: city with price bounds
city_price_index = Index(
    'idx_properties_city_price',
    Property.city,
    Property.price
)

# Composite index for type and status filtering
type_status_index = Index(
    'idx_properties_type_status',
    Property.property_type,
    Property.status
)
