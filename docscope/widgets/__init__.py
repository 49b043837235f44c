"""Widget library for the Textual UI."""

from __future__ import annotations

from .dialogs import ChoiceDialog, ColumnsDialog, CredentialsDialog
from .query_panel import QueryPanel
from .status_bar import StatusBar

__all__ = ["ChoiceDialog", "ColumnsDialog", "CredentialsDialog", "QueryPanel", "StatusBar"]
