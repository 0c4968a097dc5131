"""Storage service module.

Provides abstracted file storage operations with an S3 implementation.
"""

from .base import FileStorageService
from .exceptions import (
    StorageDeleteError,
    StorageError,
    StorageFolderNotEmptyError,
    StorageUploadError,
    StorageValidationError,
    UnsupportedExtensionError,
)
from .s3 import S3FileStorageService, S3StorageSettings
from .schemas import (
    ALLOWED_EXTENSIONS,
    FileInfo,
    ImageFormat,
    UploadSource,
    get_filename_extension,
)

__all__ = [
    # Protocol
    "FileStorageService",
    # Implementation
    "S3FileStorageService",
    "S3StorageSettings",
    # Schemas
    "ALLOWED_EXTENSIONS",
    "FileInfo",
    "ImageFormat",
    "UploadSource",
    "get_filename_extension",
    # Exceptions
    "StorageDeleteError",
    "StorageError",
    "StorageFolderNotEmptyError",
    "StorageUploadError",
    "StorageValidationError",
    "UnsupportedExtensionError",
]
