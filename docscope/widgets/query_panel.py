"""Query panel: query input, page navigation and the projected results table."""

from __future__ import annotations

from typing import Callable, Sequence

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import Button, DataTable, Input, Static

from docscope.errors import DocscopeError
from docscope.pager import QueryPager
from docscope.projection import format_cell, project_page

PagingListener = Callable[[int | None], None]


class QueryPanel(Container):
    """Runs queries through the pager and renders one cached page at a time."""

    DEFAULT_CSS = """
    QueryPanel {
        layout: vertical;
        border: round $primary 40%;
        padding: 1 2;
        height: 1fr;
        background: $surface;
    }

    QueryPanel .panel-title {
        text-style: bold;
    }

    QueryPanel Input {
        border: heavy $primary;
    }

    QueryPanel .query-actions {
        height: auto;
        margin-top: 1;
        align-horizontal: left;
    }

    QueryPanel .query-actions > * {
        margin-right: 1;
    }

    QueryPanel #page-label, QueryPanel #query-status {
        padding: 1 0;
    }

    QueryPanel #query-results {
        height: 1fr;
        margin-top: 1;
        border-top: solid $surface-darken-2;
    }
    """

    BINDINGS = Container.BINDINGS + [
        Binding("ctrl+enter", "run_query", "Run query", show=False, priority=True),
    ]

    def __init__(
        self,
        pager: QueryPager,
        *,
        columns: Sequence[str] = (),
        initial_query: str = "",
        on_query: Callable[[str], None] | None = None,
        on_paging: PagingListener | None = None,
    ) -> None:
        super().__init__(id="query-panel")
        self._pager = pager
        self._columns: tuple[str, ...] = tuple(columns)
        self._initial_query = initial_query
        self._on_query = on_query or (lambda _: None)
        self._on_paging = on_paging or (lambda _: None)
        self._current_page: int | None = None
        self._busy = False
        self._input: Input | None = None
        self._status_panel: Static | None = None
        self._page_label: Static | None = None
        self._result_table: DataTable | None = None

    @property
    def current_page(self) -> int | None:
        """Index of the page on screen, or None before the first query."""

        return self._current_page

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    def compose(self) -> ComposeResult:
        yield Static("Query", classes="panel-title")
        yield Input(value=self._initial_query, placeholder="SELECT * FROM c", id="query-input")
        yield Horizontal(
            Button("Run query", id="run-query", variant="primary"),
            Button("◀ Prev", id="prev-page"),
            Button("Next ▶", id="next-page"),
            Static("", id="page-label"),
            Static("", id="query-status"),
            classes="query-actions",
        )
        yield DataTable(id="query-results", zebra_stripes=True)

    async def on_mount(self) -> None:
        self._input = self.query_one("#query-input", Input)
        self._status_panel = self.query_one("#query-status", Static)
        self._page_label = self.query_one("#page-label", Static)
        self._result_table = self.query_one("#query-results", DataTable)
        self._result_table.cursor_type = "row"
        self.set_enabled(self._pager.context.selection.container_id is not None)
        self.render_results()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        await self.run_query()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "run-query":
            await self.run_query()
        elif button_id == "next-page":
            await self.next_page()
        elif button_id == "prev-page":
            self.previous_page()

    async def action_run_query(self) -> None:
        await self.run_query()

    def set_enabled(self, enabled: bool) -> None:
        """Enable the query controls only once a container is selected."""

        for widget in self.query("Input, Button"):
            widget.disabled = not enabled

    def set_columns(self, columns: Sequence[str]) -> None:
        self._columns = tuple(columns)
        self.render_results()

    def results_reset(self) -> None:
        """Forget the page on screen after the pager dropped its cache."""

        self._current_page = None
        self.render_results()
        self._on_paging(None)

    async def run_query(self, query: str | None = None) -> bool:
        """Start a new query; returns False when nothing ran or it failed."""

        if self._busy:
            return False
        if query is None:
            query = self._input.value if self._input else self._initial_query
        query = query.strip()
        if not query:
            self._set_status("Enter a query to run.", severity="warning")
            return False
        self._on_query(query)
        self._busy = True
        self._set_status("Executing…", severity="information")
        try:
            await self._pager.start(query)
        except DocscopeError as exc:
            self._set_status(f"Error: {exc}", severity="error")
            return False
        finally:
            self._busy = False
        self._show(0)
        self._set_status(f"{len(self._pager.get_page(0))} document(s)", severity="success")
        return True

    async def next_page(self) -> bool:
        """Move forward, fetching a new page when the cache is exhausted."""

        if self._busy or self._current_page is None:
            return False
        target = self._current_page + 1
        if target >= self._pager.cache_length:
            if not self._pager.has_more:
                return False
            self._busy = True
            self._set_status("Loading…", severity="information")
            try:
                await self._pager.load_more()
            except DocscopeError as exc:
                self._set_status(f"Error: {exc}", severity="error")
                return False
            finally:
                self._busy = False
            if target >= self._pager.cache_length:
                return False
        self._show(target)
        self._set_status(f"{len(self._pager.get_page(target))} document(s)", severity="success")
        return True

    def previous_page(self) -> bool:
        if self._busy or not self._current_page:
            return False
        self._show(self._current_page - 1)
        return True

    def render_results(self) -> None:
        if self._current_page is not None and self._current_page >= self._pager.cache_length:
            self._current_page = None
        self._render_page_label()
        if not self._result_table:
            return
        self._result_table.clear(columns=True)
        if not self._columns:
            return
        self._result_table.add_columns(*self._columns)
        if self._current_page is None:
            return
        page = self._pager.get_page(self._current_page)
        for row in project_page(page, self._columns):
            self._result_table.add_row(*(format_cell(value) for value in row))

    def _show(self, index: int) -> None:
        self._current_page = index
        self.render_results()
        self._on_paging(index)

    def _render_page_label(self) -> None:
        if not self._page_label:
            return
        if self._current_page is None:
            self._page_label.update("No results")
            return
        more = "+" if self._pager.has_more else ""
        self._page_label.update(f"Page {self._current_page + 1}/{self._pager.cache_length}{more}")

    def _set_status(self, message: str, *, severity: str) -> None:
        if not self._status_panel:
            return
        prefix = {
            "information": "ℹ",
            "warning": "⚠",
            "error": "✖",
            "success": "✔",
        }.get(severity, "•")
        self._status_panel.update(f"{prefix} {message}")


__all__ = ["QueryPanel"]
