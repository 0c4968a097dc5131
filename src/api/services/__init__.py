"""API services module."""

from .storage import (
    FileStorageService,
    S3FileStorageService,
    S3StorageSettings,
    StorageError,
)

__all__ = [
    "FileStorageService",
    "S3FileStorageService",
    "S3StorageSettings",
    "StorageError",
]
