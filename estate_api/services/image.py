"""
Image service for handling property image uploads and byte serving.
Validates uploads with Pillow and stores them as unattached database rows.
"""

from typing import List, Tuple
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from estate_api.config import settings
from estate_api.repositories.image import ImageRepository
from estate_api.utils.file_utils import FileValidator, ValidatedImage
from estate_api.utils.exceptions import (
    ValidationError,
    ImageNotFoundError,
    InternalServerError,
    FileSizeExceededError
)

logger = logging.getLogger(__name__)


class ImageService:
    """Service for managing property image uploads and retrieval."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session
        self.repository = ImageRepository(db_session)
        self.max_file_size = settings.max_file_size

    async def read_upload(self, file: UploadFile) -> bytes:
        """
        Read an upload into memory, refusing anything over the size limit.

        Reads at most one byte past the limit so oversized files are
        rejected without buffering them whole.
        """
        await file.seek(0)
        data = await file.read(self.max_file_size + 1)
        if len(data) > self.max_file_size:
            size = file.size or len(data)
            raise FileSizeExceededError(size, self.max_file_size)
        return data

    async def validate_uploads(self, files: List[UploadFile]) -> List[ValidatedImage]:
        """
        Validate every file of an upload request.

        Nothing is stored unless every file passes.

        Raises:
            ValidationError: If the request or any file is rejected
        """
        FileValidator.validate_file_count(len(files))

        validated = []
        for file in files:
            data = await self.read_upload(file)
            validated.append(
                FileValidator.validate_image_bytes(data, file.content_type, file.filename)
            )
        return validated

    async def upload_images(self, files: List[UploadFile]) -> List[int]:
        """
        Validate and store uploaded images with no property association.

        Returns:
            Ids of the stored images, in upload order
        """
        validated = await self.validate_uploads(files)

        images = await self.repository.store_unattached(
            [image.to_payload() for image in validated]
        )
        image_ids = [image.id for image in images]

        logger.info(
            f"Uploaded {len(image_ids)} images ({sum(i.file_size for i in validated)} bytes): {image_ids}"
        )
        return image_ids

    async def get_image(self, image_id: int) -> Tuple[bytes, str]:
        """
        Get the stored bytes of an image and the MIME type to serve them with.

        Raises:
            ImageNotFoundError: If no image has this id
            InternalServerError: If the stored payload is empty
        """
        payload = await self.repository.get_payload(image_id)
        if payload is None:
            raise ImageNotFoundError(image_id)

        data, mime_type = payload
        if not data:
            logger.error(f"Image {image_id} has no stored data")
            raise InternalServerError("Image data not found")

        return data, mime_type or settings.default_image_mime_type

    @staticmethod
    def parse_image_id(raw_id: str) -> int:
        """
        Parse an image id path segment.

        Raises:
            ValidationError: If the segment is not an integer
        """
        try:
            return int(raw_id)
        except (TypeError, ValueError):
            raise ValidationError("Invalid image ID")
