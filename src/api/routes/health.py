"""Health API routes."""

import logging
from collections.abc import Sequence

from litestar import Controller, get

from src.api.schemas.health import HealthResponse
from src.api.services.storage import S3FileStorageService

logger = logging.getLogger(__name__)


class HealthController(Controller):
    """Health check endpoints."""

    path = "/health"
    tags: Sequence[str] | None = ["Health"]

    @get("/")
    async def health_check(
        self,
        file_storage: S3FileStorageService,
    ) -> HealthResponse:
        """Check API and storage connectivity.

        Returns health status of the service and its bucket.
        """
        storage_connected = await file_storage.health_check()
        if not storage_connected:
            logger.warning("Health check: storage bucket unreachable")

        return HealthResponse(
            status="healthy" if storage_connected else "unhealthy",
            storage_connected=storage_connected,
        )
