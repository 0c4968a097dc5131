"""Dependency injection providers for Litestar."""

from __future__ import annotations

import logging

from litestar.di import Provide

from src.api.services.storage import S3FileStorageService, S3StorageSettings
from src.core.config import Settings

logger = logging.getLogger(__name__)

# Global singleton instance (created at app startup)
_file_storage: S3FileStorageService | None = None


# -----------------------------------------------------------------------------
# Storage dependencies
# -----------------------------------------------------------------------------


async def get_file_storage() -> S3FileStorageService:
    """Provide file storage service instance.

    Returns:
        Singleton file storage service.

    Raises:
        RuntimeError: If storage not initialized.
    """
    if _file_storage is None:
        raise RuntimeError("File storage not initialized")
    return _file_storage


def build_storage_settings(settings: Settings) -> S3StorageSettings:
    """Translate application settings into storage settings."""
    return S3StorageSettings(
        bucket_name=settings.s3_bucket_name,
        region=settings.s3_region,
        access_key_id=settings.s3_access_key_id,
        secret_access_key=settings.s3_secret_access_key,
        endpoint_url=settings.s3_endpoint_url,
        public_url_base=settings.s3_public_url_base,
        max_file_size=settings.max_upload_size_bytes,
        folder_delete_max_attempts=settings.folder_delete_max_attempts,
        user_agent=settings.image_fetch_user_agent,
        fetch_timeout=settings.image_fetch_timeout_seconds,
        raise_image_url_errors=settings.raise_image_url_errors,
    )


# -----------------------------------------------------------------------------
# Lifecycle management
# -----------------------------------------------------------------------------


async def init_services(settings: Settings) -> None:
    """Initialize service singletons.

    Called during application startup.

    Args:
        settings: Application settings.
    """
    global _file_storage

    if settings.storage_configured:
        _file_storage = S3FileStorageService(build_storage_settings(settings))
        logger.info(f"S3 storage initialized for bucket: {settings.s3_bucket_name}")
    else:
        logger.warning("S3 bucket not configured - file endpoints will be unavailable")


async def shutdown_services() -> None:
    """Cleanup service resources.

    Called during application shutdown.
    """
    global _file_storage

    if _file_storage is not None:
        await _file_storage.close()
        _file_storage = None
        logger.info("S3 storage closed")


# Dependency providers for Litestar
dependencies = {
    "file_storage": Provide(get_file_storage),
}
