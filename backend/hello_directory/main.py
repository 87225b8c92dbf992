"""
Hello Directory - Main FastAPI Application

Wires the greeting and user directory routers, builds the service
container at start-up and closes its backends at shutdown.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI

from .api.endpoints.health import router as health_router
from .api.endpoints.hello import router as hello_router
from .api.endpoints.users import router as users_router
from .api.errors import register_error_handlers
from .constants import APP_NAME, APP_VERSION
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .services.container import ServiceContainer

logger = structlog.get_logger()


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to build backends from; defaults to ``get_settings()``
        container: Ready-made container; when given, no backends are opened
            or closed by the lifespan
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
        logger.info(
            "Starting Hello Directory API",
            version=APP_VERSION,
            environment=settings.ENVIRONMENT,
        )

        owns_container = getattr(app.state, "container", None) is None
        if owns_container:
            try:
                app.state.container = await ServiceContainer.from_settings(settings)
            except Exception:
                logger.exception("Failed to initialize application")
                raise

        yield

        logger.info("Shutting down Hello Directory API")
        if owns_container:
            try:
                await app.state.container.shutdown()
            except Exception as e:
                logger.error("Error during application shutdown", error=str(e))
            app.state.container = None

    app = FastAPI(
        title=f"{APP_NAME} API",
        description="Cached greeting and user directory service",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.container = container

    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(hello_router)
    app.include_router(users_router)

    return app


app = create_app()
