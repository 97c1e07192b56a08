"""Adapters - I/O implementations of ports."""

from .rest_api import RestChurchAPI, ApiError
from .file_visitor import FileVisitorStore

__all__ = [
    "RestChurchAPI",
    "ApiError",
    "FileVisitorStore",
]
