"""Modal dialogs for credentials, container selection and column editing."""

from __future__ import annotations

from typing import Awaitable, Callable, Sequence

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, ListItem, ListView, Static

from docscope.projection import ColumnLayout

CredentialSubmitter = Callable[[str, str], Awaitable[str | None]]

DIALOG_CSS = """
{name} {
    align: center middle;
}

{name} > Vertical {
    width: 60%;
    height: auto;
    max-height: 80%;
    border: thick $primary;
    background: $surface;
    padding: 1 2;
}

{name} .dialog-title {
    text-style: bold;
    margin-bottom: 1;
}

{name} .dialog-error {
    color: $error;
}

{name} .dialog-buttons {
    height: auto;
    margin-top: 1;
}

{name} .dialog-buttons > Button {
    margin-right: 1;
}
"""


class CredentialsDialog(ModalScreen[tuple[str, str] | None]):
    """Collects an account endpoint/key and keeps itself open until they verify."""

    DEFAULT_CSS = DIALOG_CSS.replace("{name}", "CredentialsDialog")
    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, submit: CredentialSubmitter, *, endpoint: str = "", key: str = "") -> None:
        super().__init__()
        self._submit = submit
        self._endpoint = endpoint
        self._key = key

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("Configure Credentials", classes="dialog-title")
            yield Label("Account Endpoint:")
            yield Input(value=self._endpoint, placeholder="https://<account>.documents.azure.com:443/", id="endpoint")
            yield Label("Account Key:")
            yield Input(value=self._key, password=True, id="key")
            yield Static("", id="credentials-error", classes="dialog-error")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Save", id="save", variant="primary")
                yield Button("Cancel", id="cancel")

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            await self._save()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        await self._save()

    def action_cancel(self) -> None:
        self.dismiss(None)

    async def _save(self) -> None:
        endpoint = self.query_one("#endpoint", Input).value.strip()
        key = self.query_one("#key", Input).value.strip()
        error = await self._submit(endpoint, key)
        if error:
            self.query_one("#credentials-error", Static).update(error)
            return
        self.dismiss((endpoint, key))


class ChoiceDialog(ModalScreen[str | None]):
    """Lets the operator pick one id out of a list."""

    DEFAULT_CSS = DIALOG_CSS.replace("{name}", "ChoiceDialog")
    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, title: str, options: Sequence[str], *, current: str | None = None) -> None:
        super().__init__()
        self._title = title
        self._options = tuple(options)
        self._current = current

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(self._title, classes="dialog-title")
            if self._options:
                initial = self._options.index(self._current) if self._current in self._options else 0
                yield ListView(*(ListItem(Label(option)) for option in self._options), initial_index=initial)
            else:
                yield Static("Nothing to select.", classes="dialog-error")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Close", id="cancel")

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        index = event.list_view.index
        if index is not None:
            self.dismiss(self._options[index])

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class ColumnsDialog(ModalScreen[list[str] | None]):
    """Edits the ordered list of projected columns."""

    DEFAULT_CSS = DIALOG_CSS.replace("{name}", "ColumnsDialog") + """
    ColumnsDialog ListView {
        height: auto;
        max-height: 12;
    }
    """
    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, columns: Sequence[str]) -> None:
        super().__init__()
        self._layout = ColumnLayout(columns)

    @property
    def layout(self) -> ColumnLayout:
        return self._layout

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("Edit Columns", classes="dialog-title")
            yield ListView(*self._items(), id="columns")
            yield Input(placeholder="Column name", id="column-name")
            yield Static("", id="columns-error", classes="dialog-error")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Add", id="add")
                yield Button("Rename", id="rename")
                yield Button("Remove", id="remove")
                yield Button("Remove All", id="clear")
                yield Button("^", id="up")
                yield Button("v", id="down")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Done", id="done", variant="primary")
                yield Button("Cancel", id="cancel")

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        index = event.list_view.index
        if index is not None and index < len(self._layout):
            self.query_one("#column-name", Input).value = self._layout.columns[index]

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "done":
            self.dismiss(list(self._layout.columns))
            return
        if button_id == "cancel":
            self.dismiss(None)
            return
        selected = self.query_one("#columns", ListView).index
        name = self.query_one("#column-name", Input).value
        try:
            position = self._apply(button_id, selected, name)
        except (ValueError, IndexError) as exc:
            self.query_one("#columns-error", Static).update(str(exc))
            return
        self.query_one("#columns-error", Static).update("")
        await self._reload(position)

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _apply(self, action: str | None, selected: int | None, name: str) -> int | None:
        layout = self._layout
        if action == "add":
            return layout.add()
        if action == "clear":
            layout.clear()
            return None
        if selected is None:
            raise IndexError("Select a column first.")
        if action == "rename":
            layout.rename(selected, name)
            return selected
        if action == "remove":
            layout.remove(selected)
            return min(selected, len(layout) - 1) if len(layout) else None
        if action == "up":
            return layout.move_up(selected)
        if action == "down":
            return layout.move_down(selected)
        return selected

    async def _reload(self, position: int | None) -> None:
        list_view = self.query_one("#columns", ListView)
        await list_view.clear()
        await list_view.extend(self._items())
        list_view.index = position

    def _items(self) -> list[ListItem]:
        return [ListItem(Label(column)) for column in self._layout]


__all__ = ["ChoiceDialog", "ColumnsDialog", "CredentialsDialog"]
