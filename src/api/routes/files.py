"""File storage API routes.

Provides endpoints for uploading images (direct or from a remote URL)
and deleting single files or whole folders.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Annotated

import msgspec
from litestar import Controller, Request, Response, delete, post
from litestar.datastructures import UploadFile
from litestar.enums import RequestEncodingType
from litestar.params import Body, Parameter
from litestar.status_codes import (
    HTTP_200_OK,
    HTTP_400_BAD_REQUEST,
    HTTP_409_CONFLICT,
    HTTP_502_BAD_GATEWAY,
)

from src.api.services.storage import (
    FileInfo,
    S3FileStorageService,
    StorageError,
    StorageFolderNotEmptyError,
    StorageValidationError,
    UploadSource,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Request/response schemas
# -----------------------------------------------------------------------------


class ImageUrlRequest(msgspec.Struct, kw_only=True):
    """Request to copy a remote image into storage."""

    prefix: str
    url: str


class FolderDeleteResponse(msgspec.Struct, kw_only=True):
    """Response for a folder purge."""

    prefix: str
    deleted: int


class ErrorResponse(msgspec.Struct, kw_only=True):
    """Error response."""

    error: str
    detail: str | None = None


# -----------------------------------------------------------------------------
# Error mapping
# -----------------------------------------------------------------------------


def storage_exception_handler(_: Request, exc: StorageError) -> Response[ErrorResponse]:
    """Map storage errors to HTTP responses."""
    if isinstance(exc, StorageValidationError):
        logger.warning(f"Storage validation failed: {exc}")
        return Response(
            content=ErrorResponse(error="Validation failed", detail=str(exc)),
            status_code=HTTP_400_BAD_REQUEST,
        )
    if isinstance(exc, StorageFolderNotEmptyError):
        return Response(
            content=ErrorResponse(error="Folder not empty", detail=str(exc)),
            status_code=HTTP_409_CONFLICT,
        )
    logger.error(f"Storage operation failed: {exc}")
    return Response(
        content=ErrorResponse(error="Storage failure", detail=str(exc)),
        status_code=HTTP_502_BAD_GATEWAY,
    )


# -----------------------------------------------------------------------------
# Controller
# -----------------------------------------------------------------------------

PrefixParam = Annotated[
    str,
    Parameter(description="Folder the file is stored under, e.g. '{user_id}/{post_id}'"),
]


class FileController(Controller):
    """File storage endpoints.

    Accepts JPEG and PNG images. Stored files get random names and are
    addressed by the key returned on upload.
    """

    path = "/api/v1/files"
    tags: Sequence[str] | None = ["Files"]
    exception_handlers = {StorageError: storage_exception_handler}

    @post("/")
    async def upload_file(
        self,
        file_storage: S3FileStorageService,
        prefix: PrefixParam,
        data: Annotated[UploadFile, Body(media_type=RequestEncodingType.MULTI_PART)],
    ) -> FileInfo:
        """Upload a single image."""
        content = await data.read()
        return await file_storage.upload_file(prefix, content, data.filename)

    @post("/batch")
    async def upload_files(
        self,
        file_storage: S3FileStorageService,
        prefix: PrefixParam,
        data: Annotated[list[UploadFile], Body(media_type=RequestEncodingType.MULTI_PART)],
    ) -> list[FileInfo]:
        """Upload several images in order.

        Stops at the first invalid or failed file; earlier files stay stored.
        """
        sources = [
            UploadSource(data=await upload.read(), filename=upload.filename) for upload in data
        ]
        return await file_storage.upload_file_list(prefix, sources)

    @post("/from-url")
    async def upload_image_url(
        self,
        file_storage: S3FileStorageService,
        data: ImageUrlRequest,
    ) -> FileInfo:
        """Copy a remote image into storage."""
        return await file_storage.upload_image_url(data.prefix, data.url)

    @delete("/")
    async def remove_file(
        self,
        file_storage: S3FileStorageService,
        key: Annotated[str, Parameter(description="Object key returned on upload")],
    ) -> None:
        """Delete a stored file. Unknown keys are ignored."""
        await file_storage.remove_file(key)

    @delete("/folder", status_code=HTTP_200_OK)
    async def remove_folder(
        self,
        file_storage: S3FileStorageService,
        prefix: PrefixParam,
    ) -> FolderDeleteResponse:
        """Delete every file stored under a folder."""
        deleted = await file_storage.remove_folder_files(prefix)
        return FolderDeleteResponse(prefix=prefix, deleted=deleted)
