"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
import pytest
from botocore.exceptions import ClientError

from src.api.services.storage import S3FileStorageService, S3StorageSettings
from src.core.config import Settings

# 200-byte PNG payload: signature followed by padding
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 192


class FakeS3Client:
    """In-memory stand-in for the aioboto3 S3 client.

    Records every call so tests can assert on network traffic.
    """

    def __init__(self, page_size: int = 1000) -> None:
        self.objects: dict[str, dict[str, Any]] = {}
        self.calls: list[str] = []
        self.page_size = page_size
        self.on_delete: Callable[[str], None] | None = None
        self.fail_with: Exception | None = None

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    async def put_object(
        self, *, Bucket: str, Key: str, Body: bytes, ContentType: str, **kwargs: Any
    ) -> dict:
        self._record("put_object")
        self.objects[Key] = {
            "Bucket": Bucket,
            "Body": Body,
            "ContentType": ContentType,
            "ContentLength": kwargs.get("ContentLength"),
        }
        return {}

    async def delete_object(self, *, Bucket: str, Key: str) -> dict:
        self._record("delete_object")
        self.objects.pop(Key, None)
        if self.on_delete is not None:
            self.on_delete(Key)
        return {}

    async def list_objects_v2(self, *, Bucket: str, Prefix: str = "") -> dict:
        self._record("list_objects_v2")
        keys = sorted(key for key in self.objects if key.startswith(Prefix))[: self.page_size]
        response: dict[str, Any] = {"KeyCount": len(keys)}
        # S3 leaves out Contents for an empty listing
        if keys:
            response["Contents"] = [
                {"Key": key, "Size": len(self.objects[key]["Body"])} for key in keys
            ]
        return response

    async def head_bucket(self, *, Bucket: str) -> dict:
        self._record("head_bucket")
        return {}

    def seed(self, *keys: str) -> None:
        for key in keys:
            self.objects[key] = {"Bucket": "test-bucket", "Body": b"x", "ContentType": "image/png"}


def client_error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class ImageServer:
    """httpx mock handler serving a PNG for any path."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.content = PNG_BYTES
        self.headers = {"Content-Type": "image/png"}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(
            self.status_code,
            content=self.content,
            headers=self.headers,
        )


@pytest.fixture
def settings() -> Settings:
    """Provide test settings."""
    return Settings(
        s3_bucket_name="test-bucket",
        s3_region="ap-northeast-2",
        debug=True,
    )


@pytest.fixture
def storage_settings() -> S3StorageSettings:
    """Create S3 settings for testing."""
    return S3StorageSettings(
        bucket_name="test-bucket",
        region="ap-northeast-2",
        folder_delete_max_attempts=5,
    )


@pytest.fixture
def fake_s3() -> FakeS3Client:
    """Create the in-memory S3 client."""
    return FakeS3Client()


@pytest.fixture
def image_server() -> ImageServer:
    """Create the remote image handler."""
    return ImageServer()


@pytest.fixture
def http_client(image_server: ImageServer) -> httpx.AsyncClient:
    """Create an HTTP client routed to the image handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(image_server))


@pytest.fixture
def storage_service(
    storage_settings: S3StorageSettings,
    fake_s3: FakeS3Client,
    http_client: httpx.AsyncClient,
    monkeypatch: pytest.MonkeyPatch,
) -> S3FileStorageService:
    """Create S3 service wired to the fake client."""
    service = S3FileStorageService(storage_settings, http_client=http_client)

    @asynccontextmanager
    async def _fake_client() -> AsyncIterator[FakeS3Client]:
        yield fake_s3

    monkeypatch.setattr(service, "_get_client", _fake_client)
    return service
