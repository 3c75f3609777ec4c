"""Mapping of pipeline exceptions to JSON error responses."""

import logging

from fastapi.responses import JSONResponse

from sizyx.core.exceptions import SizyxError
from sizyx.models.responses import ErrorResponse

logger = logging.getLogger(__name__)


def error_response(exc: SizyxError) -> JSONResponse:
    """Build the ``{success: false, message}`` body for ``exc``.

    5xx responses carry only the generic message; the detail is logged.
    """
    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__}: {exc}",
            extra={"error_type": type(exc).__name__, "http_status": exc.status_code},
            exc_info=exc,
        )
    else:
        logger.warning(
            f"{type(exc).__name__}: {exc}",
            extra={"error_type": type(exc).__name__, "http_status": exc.status_code},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=exc.public_message).model_dump(),
    )


def internal_error_response(message: str = "Internal server error") -> JSONResponse:
    return JSONResponse(status_code=500, content=ErrorResponse(message=message).model_dump())
