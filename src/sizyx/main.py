"""Main application entrypoint for the Sizyx upload gateway."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sizyx.api import routes_gallery, routes_health, routes_upload
from sizyx.core.config import settings
from sizyx.core.logging import setup_logging
from sizyx.core.middleware import HTTPErrorLoggingMiddleware
from sizyx.services.factory import close_shopify_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release the shared Shopify HTTP client on shutdown."""
    yield
    await close_shopify_client()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    # Initialize logging first
    setup_logging()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(HTTPErrorLoggingMiddleware)
    # The web client is served from a different origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(routes_upload.router)
    app.include_router(routes_gallery.router)

    return app


# Export app instance for ASGI servers
app = create_app()
