"""Visitor storage interface."""

from typing import Protocol


class VisitorStore(Protocol):
    """Interface for the small key-value state kept on the visitor's machine.

    Each value is read and written whole.
    """

    def visitor_id(self) -> str | None:
        """The visitor identifier, or None for an anonymous visitor."""
        ...

    def set_visitor_id(self, visitor_id: str) -> None:
        ...

    def profile(self) -> dict | None:
        """The cached server profile, as last received."""
        ...

    def set_profile(self, profile: dict) -> None:
        ...

    def watched(self) -> list[str]:
        """Ids of sermons the visitor has opened."""
        ...

    def set_watched(self, sermon_ids: list[str]) -> None:
        ...
