"""
File upload utilities for image validation.
Uploads are held in memory and stored in the database, so validation works on bytes.
"""

import io
from typing import List, Optional
from PIL import Image, UnidentifiedImageError

from estate_api.config import settings
from estate_api.utils.exceptions import (
    ValidationError,
    FileUploadError,
    FileSizeExceededError,
    UnsupportedFileTypeError
)


class ValidatedImage:
    """An upload that passed validation, ready to be stored."""

    def __init__(self, data: bytes, mime_type: str, filename: Optional[str], width: int, height: int):
        self.data = data
        self.mime_type = mime_type
        self.filename = filename
        self.width = width
        self.height = height

    @property
    def file_size(self) -> int:
        return len(self.data)

    def to_payload(self) -> dict:
        """Column values for ImageRepository.store_unattached."""
        return {
            "image_data": self.data,
            "mime_type": self.mime_type,
            "file_size": self.file_size,
            "filename": self.filename,
            "width": self.width,
            "height": self.height,
        }


class FileValidator:
    """Utility class for file validation operations."""

    # Pillow format name for each supported MIME type
    PILLOW_FORMATS = {
        'image/jpeg': 'JPEG',
        'image/png': 'PNG',
        'image/webp': 'WEBP',
        'image/gif': 'GIF'
    }

    MIN_WIDTH = 1
    MIN_HEIGHT = 1
    MAX_WIDTH = 10000
    MAX_HEIGHT = 10000

    @classmethod
    def allowed_types(cls) -> List[str]:
        return [mime for mime in settings.allowed_image_types if mime in cls.PILLOW_FORMATS]

    @classmethod
    def validate_file_count(cls, count: int, max_files: Optional[int] = None) -> int:
        """
        Validate the number of files in one upload request.

        Raises:
            FileUploadError: If there are no files or too many
        """
        max_allowed = max_files or settings.max_upload_files
        if count == 0:
            raise FileUploadError("No images provided")
        if count > max_allowed:
            raise FileUploadError(f"Too many files: {count} (maximum {max_allowed})")
        return count

    @classmethod
    def validate_mime_type(cls, mime_type: Optional[str]) -> str:
        """
        Validate MIME type.

        Raises:
            UnsupportedFileTypeError: If MIME type is not supported
        """
        normalized = (mime_type or "").split(";")[0].strip().lower()
        if normalized == "image/jpg":
            normalized = "image/jpeg"

        if normalized not in cls.allowed_types():
            raise UnsupportedFileTypeError(normalized or "unknown", cls.allowed_types())

        return normalized

    @classmethod
    def validate_file_size(cls, file_size: int, max_size: Optional[int] = None) -> int:
        """
        Validate file size.

        Raises:
            FileUploadError: If the file is empty
            FileSizeExceededError: If file size exceeds limit
        """
        if file_size <= 0:
            raise FileUploadError("File is empty")

        max_allowed = max_size or settings.max_file_size
        if file_size > max_allowed:
            raise FileSizeExceededError(file_size, max_allowed)

        return file_size

    @classmethod
    def validate_image_dimensions(cls, width: int, height: int) -> None:
        if width < cls.MIN_WIDTH or height < cls.MIN_HEIGHT:
            raise ValidationError(f"Image dimensions {width}x{height} are too small")

        if width > cls.MAX_WIDTH or height > cls.MAX_HEIGHT:
            raise ValidationError(
                f"Image dimensions {width}x{height} exceed maximum {cls.MAX_WIDTH}x{cls.MAX_HEIGHT}"
            )

    @classmethod
    def validate_image_bytes(
        cls,
        data: bytes,
        declared_type: Optional[str],
        filename: Optional[str] = None
    ) -> ValidatedImage:
        """
        Comprehensive validation of one uploaded image.

        The declared type must be allowed, and Pillow must decode the bytes as
        that same format.

        Returns:
            ValidatedImage carrying the bytes, MIME type and dimensions

        Raises:
            ValidationError: If any validation fails (all subclasses map to 400)
        """
        mime_type = cls.validate_mime_type(declared_type)
        cls.validate_file_size(len(data))

        try:
            with Image.open(io.BytesIO(data)) as img:
                img.verify()
                pil_format = img.format
                width, height = img.size
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise FileUploadError(f"Invalid image file '{filename or 'upload'}': {str(e)}")

        if pil_format != cls.PILLOW_FORMATS[mime_type]:
            raise FileUploadError(
                f"File content ({pil_format}) doesn't match declared type {mime_type}"
            )

        cls.validate_image_dimensions(width, height)

        return ValidatedImage(
            data=data,
            mime_type=mime_type,
            filename=filename,
            width=width,
            height=height
        )
