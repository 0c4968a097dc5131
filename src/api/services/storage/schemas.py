"""Storage service DTOs using msgspec."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO

import msgspec

# Extensions accepted for upload, as they may appear in a filename or URL
ALLOWED_EXTENSIONS = frozenset({"jpg", "jpeg", "png"})


class ImageFormat(str, Enum):
    """Supported image formats."""

    PNG = "png"
    JPEG = "jpeg"

    @classmethod
    def from_extension(cls, ext: str) -> ImageFormat:
        """Get format from file extension."""
        ext = ext.lower().lstrip(".")
        mapping = {
            "png": cls.PNG,
            "jpeg": cls.JPEG,
            "jpg": cls.JPEG,
        }
        fmt = mapping.get(ext)
        if fmt is None:
            raise ValueError(f"Unsupported extension: {ext}")
        return fmt

    @property
    def content_type(self) -> str:
        """Get MIME type for format."""
        return {
            self.PNG: "image/png",
            self.JPEG: "image/jpeg",
        }[self]


def get_filename_extension(path: str | None) -> str | None:
    """Return the text after the last dot of the final path segment.

    ``"a/b/photo.PNG"`` gives ``"PNG"``; a name without a dot, or ending in
    one, gives ``None``.
    """
    if not path:
        return None
    name = path.rsplit("/", 1)[-1]
    _, dot, ext = name.rpartition(".")
    if not dot or not ext:
        return None
    return ext


@dataclass(frozen=True)
class UploadSource:
    """A file to upload: raw bytes or a readable binary stream."""

    data: bytes | BinaryIO
    filename: str | None = None


class FileInfo(msgspec.Struct, kw_only=True):
    """Result of a successful upload."""

    key: str  # Object key: {prefix}/{uuid}.{ext}
    url: str  # Publicly resolvable URL of the object
