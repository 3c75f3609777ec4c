"""Gallery API routes."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from sizyx.api.errors import error_response, internal_error_response
from sizyx.core.exceptions import SizyxError
from sizyx.models.responses import ErrorResponse, GalleryResponse
from sizyx.services.factory import get_gallery_lister

router = APIRouter(tags=["gallery"])
logger = logging.getLogger(__name__)


@router.get("/gallery", response_model=GalleryResponse, responses={500: {"model": ErrorResponse}})
async def gallery() -> GalleryResponse | JSONResponse:
    """List the public URLs of every stored image."""
    try:
        lister = get_gallery_lister()
        images = await lister.list_urls()
    except SizyxError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Gallery Fetch Error: {e}", exc_info=True)
        return internal_error_response("Failed to load gallery")

    return GalleryResponse(images=images)
