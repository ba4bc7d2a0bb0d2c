"""
Image API endpoints.
Handles multi-file image upload and serving stored image bytes.
"""

from typing import List
from fastapi import APIRouter, Depends, UploadFile, File, status
from fastapi.responses import Response

from estate_api.models.user import User
from estate_api.services.image import ImageService
from estate_api.schemas.image import ImageUploadResponse
from estate_api.schemas.error import get_error_responses
from estate_api.utils.dependencies import get_current_active_user, get_image_service

router = APIRouter(tags=["Images"])


@router.post(
    "/upload/images",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload property images",
    description=(
        "Upload up to 10 JPEG, PNG, WebP or GIF images of at most 5MB each. "
        "Images are stored unattached; link them by passing the returned ids "
        "as `images` when creating or updating a property."
    ),
    responses=get_error_responses(400, 401, 500)
)
async def upload_images(
    images: List[UploadFile] = File(..., description="Image files to upload"),
    current_user: User = Depends(get_current_active_user),
    image_service: ImageService = Depends(get_image_service)
) -> ImageUploadResponse:
    """Upload images and return their ids in upload order."""
    image_ids = await image_service.upload_images(images)
    return ImageUploadResponse(images=image_ids)


@router.get(
    "/images/{image_id}",
    status_code=status.HTTP_200_OK,
    summary="Get image bytes",
    description="Serve the stored image with its MIME type.",
    response_class=Response,
    responses={
        200: {"content": {"image/*": {}}, "description": "Raw image bytes"},
        **get_error_responses(400, 404, 500)
    }
)
async def get_image(
    image_id: str,
    image_service: ImageService = Depends(get_image_service)
) -> Response:
    """
    Serve an image.

    The id is taken as text so a malformed id is reported as a 400 rather
    than a routing error.
    """
    parsed_id = image_service.parse_image_id(image_id)
    data, mime_type = await image_service.get_image(parsed_id)
    return Response(
        content=data,
        media_type=mime_type,
        headers={"Cache-Control": "public, max-age=86400"}
    )
