"""Textual application entry point for docscope."""

from __future__ import annotations

import logging
from typing import Callable

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import Footer, Header

from .backends import client_factory_for
from .config import AppConfig, load_config, save_config
from .connection import ConnectionContext
from .errors import ConfigurationError, DocscopeError
from .models import Selection
from .pager import QueryPager
from .widgets import ChoiceDialog, ColumnsDialog, CredentialsDialog, QueryPanel, StatusBar

LOG = logging.getLogger(__name__)


def _load_app_config() -> AppConfig:
    """Load configuration with a small wrapper for future overrides."""

    return load_config()


def _initial_selection(config: AppConfig) -> Selection:
    if config.selected_database is None:
        if config.selected_container is not None:
            LOG.warning("Ignoring persisted container without a database", extra={"container": config.selected_container})
        return Selection()
    return Selection(database_id=config.selected_database, container_id=config.selected_container)


class DocscopeApp(App[None]):
    """Terminal browser for remote document store containers."""

    TITLE = "docscope"
    CSS = """
    Screen {
        layout: vertical;
    }
    #main-column {
        layout: vertical;
        padding: 1 2;
        height: 1fr;
    }
    """

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("f2", "credentials", "Credentials"),
        ("f3", "select_database", "Database"),
        ("f4", "select_container", "Container"),
        ("f5", "edit_columns", "Columns"),
        ("f7", "previous_page", "Prev page"),
        ("f8", "next_page", "Next page"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._config = _load_app_config()
        self._connection = ConnectionContext(
            client_factory_for(self._config.backend),
            selection=_initial_selection(self._config),
        )
        self._pager = QueryPager(self._connection, page_size=self._config.page_size)
        self._query_panel: QueryPanel | None = None
        self._status_bar: StatusBar | None = None
        self._selection_unsubscribe: Callable[[], None] | None = self._connection.subscribe(
            self._handle_selection_change
        )

    def compose(self) -> ComposeResult:
        """Compose the root layout."""

        yield Header()
        query_panel = QueryPanel(
            self._pager,
            columns=self._config.columns,
            initial_query=self._config.last_query,
            on_query=self.remember_query,
            on_paging=self._handle_paging,
        )
        self._query_panel = query_panel
        yield Container(query_panel, id="main-column")
        self._status_bar = StatusBar(self._pager)
        yield self._status_bar
        yield Footer()

    async def on_mount(self) -> None:
        if self._config.has_credentials:
            try:
                await self._connection.set_credentials(
                    self._config.account_endpoint or "",
                    self._config.account_key or "",
                )
            except ConfigurationError as exc:
                LOG.warning("Stored credentials rejected", extra={"error": str(exc)})
                self._safe_notify(f"Stored credentials rejected: {exc}", severity="error")
        self._sync_selection_view()

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def context(self) -> ConnectionContext:
        """Expose the connection context for tests."""

        return self._connection

    @property
    def pager(self) -> QueryPager:
        return self._pager

    @property
    def query_panel(self) -> QueryPanel | None:
        return self._query_panel

    def action_credentials(self) -> None:
        dialog = CredentialsDialog(
            self.apply_credentials,
            endpoint=self._config.account_endpoint or "",
            key=self._config.account_key or "",
        )
        self.push_screen(dialog, self._credentials_saved)

    async def action_select_database(self) -> None:
        try:
            databases = await self._connection.list_databases()
        except DocscopeError as exc:
            self._safe_notify(str(exc), severity="error")
            return
        dialog = ChoiceDialog("Select Database", databases, current=self._connection.selection.database_id)
        self.push_screen(dialog, self.select_database)

    async def action_select_container(self) -> None:
        try:
            containers = await self._connection.list_containers()
        except DocscopeError as exc:
            self._safe_notify(str(exc), severity="error")
            return
        dialog = ChoiceDialog("Select Container", containers, current=self._connection.selection.container_id)
        self.push_screen(dialog, self.select_container)

    def action_edit_columns(self) -> None:
        self.push_screen(ColumnsDialog(self._config.columns), self.apply_columns)

    async def action_next_page(self) -> None:
        if self._query_panel:
            await self._query_panel.next_page()

    def action_previous_page(self) -> None:
        if self._query_panel:
            self._query_panel.previous_page()

    async def apply_credentials(self, endpoint: str, key: str) -> str | None:
        """Install and verify credentials; returns an error message on failure."""

        try:
            await self._connection.set_credentials(endpoint, key)
        except ConfigurationError as exc:
            return str(exc)
        if not await self._connection.verify_connection():
            return "Invalid credentials."
        return None

    def select_database(self, database_id: str | None) -> None:
        if database_id is None:
            return
        try:
            self._connection.select_database(database_id)
        except DocscopeError as exc:
            self._safe_notify(str(exc), severity="error")
            return
        self._persist(self._config.with_selection(database_id))

    def select_container(self, container_id: str | None) -> None:
        if container_id is None:
            return
        try:
            self._connection.select_container(container_id)
        except DocscopeError as exc:
            self._safe_notify(str(exc), severity="error")
            return
        self._persist(self._config.with_selection(self._connection.selection.database_id, container_id))

    def apply_columns(self, columns: list[str] | None) -> None:
        if columns is None:
            return
        self._persist(self._config.with_columns(columns))
        if self._query_panel:
            self._query_panel.set_columns(columns)

    def remember_query(self, query: str) -> None:
        """Persist the query text before it runs."""

        if self._config.last_query == query:
            return
        self._persist(self._config.with_last_query(query))

    async def _shutdown(self) -> None:
        if self._selection_unsubscribe:
            self._selection_unsubscribe()
            self._selection_unsubscribe = None
        await self._pager.aclose()
        await super()._shutdown()

    def _credentials_saved(self, result: tuple[str, str] | None) -> None:
        if result is None:
            return
        endpoint, key = result
        self._persist(self._config.with_credentials(endpoint, key))
        self._sync_selection_view()
        self._safe_notify("Credentials saved.", severity="information")

    def _persist(self, config: AppConfig) -> None:
        self._config = config
        try:
            save_config(config)
        except OSError:
            LOG.exception("Failed to save settings")
            self._safe_notify("Failed to save settings.", severity="error")

    def _handle_selection_change(self, _selection: Selection) -> None:
        if self._query_panel:
            self._query_panel.results_reset()
        self._sync_selection_view()

    def _handle_paging(self, page: int | None) -> None:
        if self._status_bar:
            self._status_bar.show_page(page)

    def _sync_selection_view(self) -> None:
        selection = self._connection.selection
        self.sub_title = selection.label
        if self._query_panel and self._query_panel.is_mounted:
            self._query_panel.set_enabled(selection.container_id is not None)
        if self._status_bar and self._status_bar.is_mounted:
            self._status_bar.refresh_status()

    def _safe_notify(self, message: str, *, severity: str = "information") -> None:
        try:
            self.notify(message, severity=severity)
        except Exception:
            LOG.exception("Failed to display notification", extra={"notification": message})


def main() -> None:
    """Invoke the Textual application."""

    DocscopeApp().run()


if __name__ == "__main__":
    main()
