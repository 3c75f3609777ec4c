"""API response models."""

from typing import Literal, Optional

from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Response model for a successful upload."""

    success: Literal[True] = True
    message: str
    url: Optional[str] = None  # First image, kept for single-file clients
    images: list[str]


class GalleryResponse(BaseModel):
    """Response model for the gallery listing."""

    success: Literal[True] = True
    images: list[str]


class ErrorResponse(BaseModel):
    """Response model for any failed request."""

    success: Literal[False] = False
    message: str
