"""Tests for storage schemas."""

import io

import msgspec
import pytest

from src.api.services.storage.schemas import (
    ALLOWED_EXTENSIONS,
    FileInfo,
    ImageFormat,
    UploadSource,
    get_filename_extension,
)


class TestImageFormat:
    """Tests for ImageFormat enum."""

    def test_from_extension_png(self) -> None:
        """Test PNG extension parsing."""
        assert ImageFormat.from_extension("png") == ImageFormat.PNG
        assert ImageFormat.from_extension(".png") == ImageFormat.PNG
        assert ImageFormat.from_extension("PNG") == ImageFormat.PNG

    def test_from_extension_jpeg(self) -> None:
        """Test JPEG extension parsing."""
        assert ImageFormat.from_extension("jpeg") == ImageFormat.JPEG
        assert ImageFormat.from_extension("jpg") == ImageFormat.JPEG
        assert ImageFormat.from_extension(".JPG") == ImageFormat.JPEG

    def test_from_extension_invalid(self) -> None:
        """Test invalid extension raises error."""
        with pytest.raises(ValueError, match="Unsupported extension"):
            ImageFormat.from_extension("gif")

        with pytest.raises(ValueError):
            ImageFormat.from_extension("webp")

    def test_content_type_property(self) -> None:
        """Test content_type property returns correct MIME type."""
        assert ImageFormat.PNG.content_type == "image/png"
        assert ImageFormat.JPEG.content_type == "image/jpeg"

    def test_allowed_extensions_map_to_formats(self) -> None:
        """Every allowed extension resolves to a format."""
        assert ALLOWED_EXTENSIONS == {"jpg", "jpeg", "png"}
        for ext in ALLOWED_EXTENSIONS:
            assert ImageFormat.from_extension(ext) in ImageFormat


class TestGetFilenameExtension:
    """Tests for extension extraction."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("photo.png", "png"),
            ("photo.JPG", "JPG"),
            ("archive.tar.gz", "gz"),
            ("users/1/photo.jpeg", "jpeg"),
            (".png", "png"),
            ("/images/cat.png", "png"),
        ],
    )
    def test_extracts_last_suffix(self, path: str, expected: str) -> None:
        """Test the text after the last dot is returned."""
        assert get_filename_extension(path) == expected

    @pytest.mark.parametrize("path", [None, "", "photo", "photo.", "dir.v2/photo"])
    def test_missing_extension(self, path: str | None) -> None:
        """Test names without an extension give None."""
        assert get_filename_extension(path) is None


class TestFileInfo:
    """Tests for FileInfo struct."""

    def test_encodes_key_and_url(self) -> None:
        """Test JSON encoding uses plain field names."""
        info = FileInfo(key="a/b.png", url="https://bucket.example/a/b.png")

        decoded = msgspec.json.decode(msgspec.json.encode(info))

        assert decoded == {"key": "a/b.png", "url": "https://bucket.example/a/b.png"}

    def test_requires_keywords(self) -> None:
        """Test FileInfo is keyword-only."""
        with pytest.raises(TypeError):
            FileInfo("a/b.png", "https://bucket.example/a/b.png")  # type: ignore[misc]


class TestUploadSource:
    """Tests for UploadSource record."""

    def test_filename_optional(self) -> None:
        """Test filename defaults to None."""
        source = UploadSource(data=b"abc")
        assert source.filename is None

    def test_accepts_stream(self) -> None:
        """Test a stream can be carried as data."""
        stream = io.BytesIO(b"abc")
        source = UploadSource(data=stream, filename="a.png")
        assert source.data is stream
