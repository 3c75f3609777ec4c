"""Upload API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import JSONResponse

from sizyx.api.errors import error_response, internal_error_response
from sizyx.core.config import settings
from sizyx.core.exceptions import SizyxError, ValidationError
from sizyx.core.logging import customer_email_context
from sizyx.models.responses import ErrorResponse, UploadResponse
from sizyx.models.upload import FileBlob, UploadRequest
from sizyx.services.factory import get_upload_pipeline

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)


async def read_upload_request(
    customer_email: Optional[str],
    uploads: list[UploadFile],
    customer_name: Optional[str] = None,
    caption: Optional[str] = None,
) -> UploadRequest:
    """Validate the form and load the files into memory.

    Raises:
        ValidationError: Missing email, no files, too many files or a file
            over the size ceiling.
    """
    email = (customer_email or "").strip()
    if not email:
        raise ValidationError("Customer email is required.")

    uploads = [upload for upload in uploads if upload.filename]
    if not uploads:
        raise ValidationError("No file uploaded.")
    if len(uploads) > settings.MAX_FILES_PER_REQUEST:
        raise ValidationError(
            f"Too many files. Maximum {settings.MAX_FILES_PER_REQUEST} allowed."
        )

    files = []
    for upload in uploads:
        data = await upload.read()
        if len(data) > settings.max_upload_bytes:
            raise ValidationError(
                f"File {upload.filename} exceeds maximum allowed size of {settings.MAX_UPLOAD_MB}MB"
            )
        files.append(
            FileBlob(
                filename=upload.filename,
                mime_type=upload.content_type or "application/octet-stream",
                data=data,
            )
        )

    return UploadRequest(
        customer_email=email,
        files=tuple(files),
        customer_name=(customer_name or "").strip() or None,
        caption=(caption or "").strip() or None,
    )


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_images(
    photos: Optional[list[UploadFile]] = File(None),
    photo: Optional[UploadFile] = File(None),
    customer_email: Optional[str] = Form(None),
    customer_name: Optional[str] = Form(None),
    caption: Optional[str] = Form(None),
) -> UploadResponse | JSONResponse:
    """Upload 1-3 images for a customer."""
    uploads = list(photos or [])
    if photo is not None:
        uploads.append(photo)

    try:
        request = await read_upload_request(customer_email, uploads, customer_name, caption)
        customer_email_context.set(request.customer_email)

        try:
            pipeline = get_upload_pipeline()
        except ValueError as e:
            logger.error(f"Storage backend configuration error: {e}")
            return internal_error_response("Storage configuration error")

        artifacts = await pipeline.run(request)

    except SizyxError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Unexpected error during upload: {e}", exc_info=True)
        return internal_error_response("Server error")

    urls = [artifact.url for artifact in artifacts]
    message = "File uploaded successfully" if len(urls) == 1 else "Files uploaded successfully"
    return UploadResponse(message=message, url=urls[0], images=urls)
