"""Storage service exceptions."""

from __future__ import annotations


class StorageError(Exception):
    """Base exception for storage operations."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class StorageUploadError(StorageError):
    """Raised when reading the payload or writing the object fails."""


class StorageDeleteError(StorageError):
    """Raised when file deletion fails."""


class StorageFolderNotEmptyError(StorageDeleteError):
    """Raised when objects remain under a prefix after every purge pass."""

    def __init__(self, prefix: str, attempts: int, remaining: int) -> None:
        super().__init__(
            f"Prefix '{prefix}' still holds {remaining} object(s) after {attempts} delete passes"
        )
        self.prefix = prefix
        self.attempts = attempts
        self.remaining = remaining


class StorageValidationError(StorageError):
    """Raised when file validation fails (size, type, etc.)."""


class UnsupportedExtensionError(StorageValidationError):
    """Raised when a file extension is missing or not allowed."""

    def __init__(self, extension: str | None) -> None:
        if extension:
            message = f"Unsupported extension: {extension}"
        else:
            message = "File has no extension"
        super().__init__(message)
        self.extension = extension
