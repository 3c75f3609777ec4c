"""Liveness and health check endpoints."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from sizyx.core.config import settings

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Liveness probe for Cloud Run."""
    return "Sizyx Server is running!"


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns service status, name, version and the configured storage
    backend. No upstream call is made.
    """
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "backend": settings.STORAGE_BACKEND,
    }
