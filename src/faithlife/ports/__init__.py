"""Ports - interfaces/protocols for external dependencies."""

from .church_api import ChurchAPI
from .visitor_store import VisitorStore

__all__ = [
    "ChurchAPI",
    "VisitorStore",
]
