"""Append-only store of pages fetched for the current query."""

from __future__ import annotations

from typing import Iterator

from .errors import NotFoundError
from .models import Page


class PageCache:
    """Ordered pages with stable indices; cleared only by `reset`."""

    def __init__(self) -> None:
        self._pages: list[Page] = []

    def __len__(self) -> int:
        return len(self._pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(tuple(self._pages))

    def append(self, page: Page) -> int:
        """Store a page at the end and return its index."""

        self._pages.append(tuple(page))
        return len(self._pages) - 1

    def get(self, index: int) -> Page:
        if not 0 <= index < len(self._pages):
            raise NotFoundError(f"Page {index} has not been fetched ({len(self._pages)} cached).")
        return self._pages[index]

    def reset(self) -> None:
        self._pages.clear()


__all__ = ["PageCache"]
