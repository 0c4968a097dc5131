"""API routes module."""

from .files import FileController
from .health import HealthController

__all__ = [
    "FileController",
    "HealthController",
]
