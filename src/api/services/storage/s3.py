"""S3 file storage service implementation."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, BinaryIO
from urllib.parse import quote
from uuid import UUID, uuid4

import aioboto3
import httpx
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import (
    StorageDeleteError,
    StorageFolderNotEmptyError,
    StorageUploadError,
    StorageValidationError,
    UnsupportedExtensionError,
)
from .schemas import (
    ALLOWED_EXTENSIONS,
    FileInfo,
    ImageFormat,
    UploadSource,
    get_filename_extension,
)

if TYPE_CHECKING:
    from types_aiobotocore_s3 import S3Client

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 20 * 1024 * 1024  # 20MB
DEFAULT_REGION = "ap-northeast-2"
DEFAULT_FOLDER_DELETE_MAX_ATTEMPTS = 10
DEFAULT_USER_AGENT = "Mozilla/5.0"
DEFAULT_FETCH_TIMEOUT = 30.0


class S3StorageSettings:
    """S3-specific configuration."""

    def __init__(
        self,
        *,
        bucket_name: str,
        region: str = DEFAULT_REGION,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        endpoint_url: str | None = None,
        public_url_base: str | None = None,
        max_file_size: int = MAX_FILE_SIZE,
        folder_delete_max_attempts: int = DEFAULT_FOLDER_DELETE_MAX_ATTEMPTS,
        user_agent: str = DEFAULT_USER_AGENT,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
        raise_image_url_errors: bool = True,
    ) -> None:
        self.bucket_name = bucket_name
        self.region = region
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.endpoint_url = endpoint_url
        self.public_url_base = public_url_base
        self.max_file_size = max_file_size
        self.folder_delete_max_attempts = folder_delete_max_attempts
        self.user_agent = user_agent
        self.fetch_timeout = fetch_timeout
        self.raise_image_url_errors = raise_image_url_errors


class S3FileStorageService:
    """S3 file storage service implementation.

    Stores images under caller-chosen prefixes with random UUID names.
    Works against AWS S3 or any S3-compatible endpoint. Every operation
    finishes its storage calls before returning; list uploads run one
    file at a time.
    """

    def __init__(
        self,
        settings: S3StorageSettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize S3 storage service.

        Args:
            settings: S3 configuration settings.
            http_client: Client used to fetch remote images. One is created
                on first use (and closed by ``close``) when omitted.
        """
        self._settings = settings
        self._session = aioboto3.Session()
        self._client_config = Config(
            signature_version="s3v4",
            retries={"max_attempts": 3, "mode": "adaptive"},
            connect_timeout=10,
            read_timeout=30,
        )
        self._http_client = http_client
        self._owns_http_client = http_client is None

    @property
    def settings(self) -> S3StorageSettings:
        return self._settings

    @asynccontextmanager
    async def _get_client(self) -> AsyncIterator[S3Client]:
        """Get S3 client with context management.

        Yields:
            Configured S3 client.
        """
        async with self._session.client(  # type: ignore[reportGeneralTypeIssues]
            "s3",
            region_name=self._settings.region,
            endpoint_url=self._settings.endpoint_url,
            aws_access_key_id=self._settings.access_key_id,
            aws_secret_access_key=self._settings.secret_access_key,
            config=self._client_config,
        ) as client:
            yield client

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._settings.fetch_timeout, connect=10.0),
                follow_redirects=True,
            )
        return self._http_client

    # -------------------------------------------------------------------------
    # Naming and validation
    # -------------------------------------------------------------------------

    def _resolve_format(self, extension: str | None) -> tuple[str, ImageFormat]:
        """Validate an extension and map it to an image format.

        Returns:
            The lower-cased extension and its format.

        Raises:
            UnsupportedExtensionError: If the extension is missing or not allowed.
        """
        if not extension or extension.lower() not in ALLOWED_EXTENSIONS:
            raise UnsupportedExtensionError(extension)
        ext = extension.lower()
        return ext, ImageFormat.from_extension(ext)

    def _check_size(self, size: int) -> None:
        if size > self._settings.max_file_size:
            raise StorageValidationError(
                f"File size {size} bytes exceeds maximum {self._settings.max_file_size} bytes"
            )

        if size == 0:
            raise StorageValidationError("File is empty")

    def _read_payload(self, data: bytes | BinaryIO) -> bytes:
        """Read an upload payload into memory.

        Raises:
            StorageUploadError: If the stream cannot be read.
            StorageValidationError: If the payload is empty or too large.
        """
        if isinstance(data, (bytes, bytearray, memoryview)):
            payload = bytes(data)
        else:
            try:
                payload = data.read()
            except OSError as e:
                logger.error(f"Failed to read upload payload: {e}")
                raise StorageUploadError(f"Failed to read file: {e}", cause=e) from e

        self._check_size(len(payload))
        return payload

    def build_object_key(
        self,
        prefix: str,
        extension: str,
        file_id: UUID | None = None,
    ) -> str:
        """Build the object key for a file.

        Key format: {prefix}/{file_id}.{ext}. A trailing slash on the prefix
        is not doubled and an empty prefix places the file at the bucket root.
        """
        name = f"{file_id or uuid4()}.{extension}"
        if not prefix:
            return name
        if prefix.endswith("/"):
            return f"{prefix}{name}"
        return f"{prefix}/{name}"

    def get_public_url(self, key: str) -> str:
        """Build the public URL for an object key."""
        quoted = quote(key, safe="/")
        if self._settings.public_url_base:
            return f"{self._settings.public_url_base.rstrip('/')}/{quoted}"
        if self._settings.endpoint_url:
            endpoint = self._settings.endpoint_url.rstrip("/")
            return f"{endpoint}/{self._settings.bucket_name}/{quoted}"
        return (
            f"https://{self._settings.bucket_name}.s3."
            f"{self._settings.region}.amazonaws.com/{quoted}"
        )

    # -------------------------------------------------------------------------
    # Uploads
    # -------------------------------------------------------------------------

    async def _put_object(
        self,
        key: str,
        body: bytes,
        content_type: str,
        content_length: int | None = None,
    ) -> None:
        params = {
            "Bucket": self._settings.bucket_name,
            "Key": key,
            "Body": body,
            "ContentType": content_type,
        }
        if content_length is not None:
            params["ContentLength"] = content_length

        try:
            async with self._get_client() as client:
                await client.put_object(**params)
        except ClientError as e:
            logger.error(f"S3 upload failed for {key}: {e}")
            raise StorageUploadError(
                f"Failed to upload file: {e.response['Error']['Message']}",
                cause=e,
            ) from e
        except BotoCoreError as e:
            logger.error(f"Unexpected error uploading to S3: {e}")
            raise StorageUploadError(f"Upload failed: {e}", cause=e) from e

    async def upload_file(
        self,
        prefix: str,
        data: bytes | BinaryIO,
        filename: str | None,
    ) -> FileInfo:
        """Upload a single file under a prefix.

        Raises:
            StorageValidationError: If the extension is unsupported or the
                payload is empty or larger than ``max_file_size``.
            StorageUploadError: If the payload cannot be read or stored.
        """
        ext, image_format = self._resolve_format(get_filename_extension(filename))
        payload = self._read_payload(data)
        key = self.build_object_key(prefix, ext)

        await self._put_object(key, payload, image_format.content_type)
        logger.info(f"Uploaded file to S3: {key} ({len(payload)} bytes, original={filename})")

        return FileInfo(key=key, url=self.get_public_url(key))

    async def upload_file_list(
        self,
        prefix: str,
        files: Sequence[UploadSource],
    ) -> list[FileInfo]:
        """Upload files one after another under a prefix.

        Nothing is rolled back when a later file fails.
        """
        results: list[FileInfo] = []
        for source in files:
            results.append(await self.upload_file(prefix, source.data, source.filename))
        return results

    async def _fetch_and_put(self, image_url: str, key: str, content_type: str) -> None:
        """Download a remote image and store it.

        The body is read fully into memory before the put. A declared
        Content-Length over the size limit is rejected before reading. The
        declared length is used for the put unless the body was
        content-encoded.
        """
        client = self._get_http_client()
        async with client.stream(
            "GET",
            image_url,
            headers={"User-Agent": self._settings.user_agent},
        ) as response:
            response.raise_for_status()

            declared = response.headers.get("Content-Length")
            encoded = response.headers.get("Content-Encoding", "identity") != "identity"
            content_length = int(declared) if declared and declared.isdigit() else None
            if content_length is not None:
                self._check_size(content_length)

            data = await response.aread()

        if content_length is None or encoded:
            content_length = len(data)
        elif content_length != len(data):
            raise StorageUploadError(
                f"Received {len(data)} bytes but {image_url} declared {content_length}"
            )
        self._check_size(content_length)

        await self._put_object(key, data, content_type, content_length=content_length)

    async def upload_image_url(self, prefix: str, image_url: str) -> FileInfo:
        """Fetch a remote image and store it under a prefix.

        When ``raise_image_url_errors`` is off, fetch and upload failures are
        logged and the result is returned anyway; its key may then point to
        an object that was never written.
        """
        try:
            url_path = httpx.URL(image_url).path
        except httpx.InvalidURL as e:
            raise StorageValidationError(f"Invalid image URL: {image_url}", cause=e) from e

        ext, image_format = self._resolve_format(get_filename_extension(url_path))
        key = self.build_object_key(prefix, ext)

        try:
            await self._fetch_and_put(image_url, key, image_format.content_type)
            logger.info(f"Uploaded image from {image_url} to S3: {key}")
        except httpx.HTTPError as e:
            if self._settings.raise_image_url_errors:
                logger.error(f"Failed to fetch image {image_url}: {e}")
                raise StorageUploadError(
                    f"Failed to fetch image: {e}",
                    cause=e,
                ) from e
            logger.exception(f"Failed to fetch image {image_url}, returning {key} anyway")
        except StorageUploadError:
            if self._settings.raise_image_url_errors:
                raise
            logger.exception(f"Failed to store image {image_url}, returning {key} anyway")

        return FileInfo(key=key, url=self.get_public_url(key))

    # -------------------------------------------------------------------------
    # Deletes
    # -------------------------------------------------------------------------

    async def remove_file(self, key: str) -> None:
        """Delete an object. S3 reports success for missing keys."""
        try:
            async with self._get_client() as client:
                await client.delete_object(
                    Bucket=self._settings.bucket_name,
                    Key=key,
                )
            logger.info(f"Deleted file from S3: {key}")

        except ClientError as e:
            logger.error(f"S3 delete failed for {key}: {e}")
            raise StorageDeleteError(
                f"Failed to delete file: {e.response['Error']['Message']}",
                cause=e,
            ) from e

    async def _list_keys(self, client: S3Client, prefix: str) -> list[str]:
        # Single page only; the purge loop picks up anything past it
        response = await client.list_objects_v2(
            Bucket=self._settings.bucket_name,
            Prefix=prefix,
        )
        return [obj["Key"] for obj in response.get("Contents", [])]

    async def remove_folder_files(self, prefix: str) -> int:
        """Delete every object under a prefix.

        Lists the prefix, deletes what was listed and lists again until the
        listing comes back empty, giving up after
        ``folder_delete_max_attempts`` delete passes.
        """
        if not prefix:
            raise StorageValidationError("Refusing to purge an empty prefix")

        max_attempts = self._settings.folder_delete_max_attempts
        deleted = 0
        attempts = 0

        try:
            async with self._get_client() as client:
                keys = await self._list_keys(client, prefix)
                while keys:
                    if attempts >= max_attempts:
                        raise StorageFolderNotEmptyError(prefix, attempts, len(keys))
                    attempts += 1

                    for key in keys:
                        await client.delete_object(
                            Bucket=self._settings.bucket_name,
                            Key=key,
                        )
                    deleted += len(keys)
                    logger.debug(f"Purge pass {attempts} deleted {len(keys)} objects under {prefix}")

                    keys = await self._list_keys(client, prefix)
                    if keys:
                        logger.info(f"{len(keys)} objects remain under {prefix}, deleting again")

        except ClientError as e:
            logger.error(f"S3 folder delete failed for {prefix}: {e}")
            raise StorageDeleteError(
                f"Failed to delete folder: {e.response['Error']['Message']}",
                cause=e,
            ) from e

        logger.info(f"Deleted folder {prefix} from S3 ({deleted} objects)")
        return deleted

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def health_check(self) -> bool:
        """Check if the bucket is accessible."""
        try:
            async with self._get_client() as client:
                await client.head_bucket(Bucket=self._settings.bucket_name)
                return True
        except Exception as e:
            logger.warning(f"S3 health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close the HTTP client if this service created it.

        aioboto3 manages S3 connections per-context.
        """
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
