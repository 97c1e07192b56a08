"""Pure pagination helpers shared by event and sermon listings."""

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of a listing."""

    items: list[T]
    number: int
    page_count: int
    total: int

    @property
    def has_next(self) -> bool:
        return self.number + 1 < self.page_count

    def format(self) -> str:
        if not self.page_count:
            return "Page 0 of 0"
        return f"Page {self.number + 1} of {self.page_count} ({self.total} total)"


def paginate(items: list[T], page: int = 0, per_page: int = 6) -> Page[T]:
    """
    Slice a zero-based page out of `items`.

    Negative pages clamp to 0; pages past the end come back empty.
    """
    if per_page < 1:
        raise ValueError(f"per_page must be positive, got {per_page}")
    page = max(page, 0)
    offset = page * per_page
    return Page(
        items=items[offset : offset + per_page],
        number=page,
        page_count=math.ceil(len(items) / per_page),
        total=len(items),
    )
