"""
PropertyImage model for uploaded listing photos.
Image bytes live in the database; the property association is nullable so
uploads can exist before the listing they illustrate.
"""

from sqlalchemy import String, Integer, Boolean, ForeignKey, Index, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column
from estate_api.database import Base
from typing import Optional


class PropertyImage(Base):
    """
    Stored image payload plus its association to a property.
    image_data, mime_type and file_size are written once at upload time;
    only property_id, is_primary and display_order change afterwards.
    """

    __tablename__ = "property_images"

    property_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("properties.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Property this image is linked to, NULL while unattached"
    )

    image_data: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
        comment="Raw image bytes"
    )

    mime_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="MIME type of the image payload"
    )

    file_size: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Payload size in bytes"
    )

    filename: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Original filename of the upload"
    )

    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    is_primary: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether this is the primary image for the property"
    )

    display_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Position of the image in the property gallery"
    )

    def __repr__(self) -> str:
        return f"<PropertyImage(id={self.id}, property_id={self.property_id}, mime_type={self.mime_type})>"

    @property
    def file_size_mb(self) -> float:
        return round(self.file_size / (1024 * 1024), 2)

    @property
    def is_attached(self) -> bool:
        return self.property_id is not None

    def to_dict(self) -> dict:
        """Metadata only; the payload is served by the image route."""
        return {
            "id": self.id,
            "property_id": self.property_id,
            "filename": self.filename,
            "mime_type": self.mime_type,
            "file_size": self.file_size,
            "width": self.width,
            "height": self.height,
            "is_primary": self.is_primary,
            "display_order": self.display_order,
        }


# Gallery lookup: images of a property in display order
property_gallery_index = Index(
    'idx_property_images_gallery',
    PropertyImage.property_id,
    PropertyImage.display_order
)
