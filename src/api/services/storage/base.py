"""Storage service protocol definition."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, BinaryIO, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .schemas import FileInfo, UploadSource


@runtime_checkable
class FileStorageService(Protocol):
    """Protocol for file storage backends.

    Defines the upload and delete operations the web application relies
    on. Keys are generated by the backend; callers only pick the prefix.
    """

    async def upload_file(
        self,
        prefix: str,
        data: bytes | BinaryIO,
        filename: str | None,
    ) -> FileInfo:
        """Upload a single file under a prefix.

        Args:
            prefix: Logical folder for the object (e.g. ``"{user_id}/{post_id}"``).
            data: Raw file bytes or a readable binary stream.
            filename: Original filename, used to derive the extension.

        Returns:
            Generated object key and its public URL.

        Raises:
            UnsupportedExtensionError: If the extension is missing or not allowed.
            StorageValidationError: If the payload is empty or too large.
            StorageUploadError: If reading the payload or writing the object fails.
        """
        ...

    async def upload_file_list(
        self,
        prefix: str,
        files: Sequence[UploadSource],
    ) -> list[FileInfo]:
        """Upload files one after another under a prefix.

        The first failure is raised; files uploaded before it stay in storage.
        """
        ...

    async def upload_image_url(
        self,
        prefix: str,
        image_url: str,
    ) -> FileInfo:
        """Fetch a remote image and store it under a prefix.

        Raises:
            UnsupportedExtensionError: If the URL path has no allowed extension.
            StorageUploadError: If fetching or storing fails and the backend
                is configured to raise.
        """
        ...

    async def remove_file(self, key: str) -> None:
        """Delete an object. Missing keys are ignored.

        Raises:
            StorageDeleteError: If deletion fails.
        """
        ...

    async def remove_folder_files(self, prefix: str) -> int:
        """Delete every object under a prefix.

        Returns:
            Number of objects deleted.

        Raises:
            StorageFolderNotEmptyError: If objects remain after the last pass.
            StorageDeleteError: If listing or deletion fails.
        """
        ...

    def get_public_url(self, key: str) -> str:
        """Build the public URL for an object key."""
        ...

    async def health_check(self) -> bool:
        """Check if storage backend is accessible."""
        ...

    async def close(self) -> None:
        """Release open connections.

        Called during application shutdown.
        """
        ...
