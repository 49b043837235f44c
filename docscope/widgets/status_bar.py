"""Status bar widget that mirrors connection and paging information."""

from __future__ import annotations

from typing import Callable
from urllib.parse import urlsplit

from textual.widgets import Static

from docscope.connection import ConnectionContext
from docscope.models import Selection
from docscope.pager import QueryPager


class StatusBar(Static):
    """Compact status strip rendered above Textual's footer."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        padding: 0 1;
        background: $surface-darken-3;
        color: $text;
    }
    """

    def __init__(self, pager: QueryPager) -> None:
        super().__init__("", id="status-bar")
        self._pager = pager
        self._page: int | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def context(self) -> ConnectionContext:
        return self._pager.context

    async def on_mount(self) -> None:
        self._unsubscribe = self.context.subscribe(self._handle_selection_change)
        self.refresh_status()

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def show_page(self, page: int | None) -> None:
        self._page = page
        self.refresh_status()

    def refresh_status(self) -> None:
        self.update(self.describe())

    def describe(self) -> str:
        context = self.context
        account = urlsplit(context.endpoint).hostname if context.endpoint else None
        parts = [
            f"Account: {account or 'not configured'}",
            f"Container: {context.selection.label or '—'}",
        ]
        if self._page is None:
            parts.append("Pages: —")
        else:
            more = "+" if self._pager.has_more else ""
            parts.append(f"Page: {self._page + 1}/{self._pager.cache_length}{more}")
        parts.append(f"Page size: {self._pager.page_size}")
        return " | ".join(parts)

    def _handle_selection_change(self, _selection: Selection) -> None:
        self._page = None
        self.refresh_status()


__all__ = ["StatusBar"]
