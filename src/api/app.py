"""Litestar application factory and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from litestar import Litestar
from litestar.config.cors import CORSConfig
from litestar.datastructures import UploadFile
from litestar.logging import LoggingConfig
from litestar.openapi import OpenAPIConfig
from litestar.openapi.spec import Contact, Server

from src.api.dependencies import dependencies, init_services, shutdown_services
from src.api.routes import FileController, HealthController
from src.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: Litestar) -> AsyncGenerator[None, None]:  # noqa: ARG001
    """Application lifespan manager.

    Initializes services on startup and cleans up on shutdown.
    """
    settings = get_settings()

    logger.info(f"Starting file storage service, bucket={settings.s3_bucket_name or '<unset>'}")

    await init_services(settings)

    try:
        yield
    finally:
        logger.info("Shutting down file storage service")
        await shutdown_services()


def create_app() -> Litestar:
    """Create and configure Litestar application.

    Returns:
        Configured Litestar application instance.
    """
    settings = get_settings()

    # CORS configuration for development
    cors_config = CORSConfig(
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging configuration
    logging_config = LoggingConfig(
        root={
            "level": "DEBUG" if settings.debug else "INFO",
            "handlers": ["console"],
        },
        formatters={
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        handlers={
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
        },
        loggers={
            "src": {
                "level": "DEBUG" if settings.debug else "INFO",
                "propagate": True,
            },
            "httpx": {
                "level": "WARNING",
                "propagate": False,
            },
            "botocore": {
                "level": "WARNING",
                "propagate": False,
            },
        },
    )

    # OpenAPI documentation configuration
    openapi_config = OpenAPIConfig(
        title="File Storage API",
        version="0.1.0",
        description="Image upload and deletion backed by S3",
        contact=Contact(name="API Support"),
        servers=[
            Server(
                url=f"http://{settings.api_host}:{settings.api_port}",
                description="Local development server",
            ),
        ],
        path="/docs",
    )

    app = Litestar(
        route_handlers=[
            HealthController,
            FileController,
        ],
        dependencies=dependencies,
        lifespan=[lifespan],
        cors_config=cors_config,
        logging_config=logging_config,
        openapi_config=openapi_config,
        debug=settings.debug,
        signature_types=[UploadFile],
    )

    return app


# Application instance for uvicorn
app = create_app()
