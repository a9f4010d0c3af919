"""Main application entrypoint for the media store service."""

from fastapi import FastAPI

from mediastore.api.v1 import routes_health
from mediastore.api.v1.routes_upload import router as upload_router
from mediastore.core.config import settings
from mediastore.core.logging import setup_logging
from mediastore.storage.factory import get_storage_adapter


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    setup_logging()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
    )

    # Stored files are served by the backend itself
    app.middleware("http")(get_storage_adapter().serve())

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(upload_router)

    return app


# Export app instance for ASGI servers
app = create_app()
