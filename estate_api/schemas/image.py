"""
Pydantic schemas for image upload responses.
"""

from pydantic import BaseModel, Field
from typing import List


class ImageUploadResponse(BaseModel):
    """Ids of freshly stored, not yet linked images."""

    message: str = "Images uploaded successfully"
    images: List[int] = Field(..., description="Ids to pass as `images` when creating or updating a property")
