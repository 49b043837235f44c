"""Projection of schema-less documents onto the user's column list."""

from __future__ import annotations

import json
from typing import Any, Iterable, Iterator, Sequence

from .models import Document, Page


class _Missing:
    """Marker for a field the document does not carry."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def lookup(document: Document, field: str) -> Any:
    """Return the field value, or `MISSING` when the document lacks it."""

    try:
        return document[field]
    except (KeyError, TypeError):
        return MISSING


def project_document(document: Document, columns: Sequence[str], *, missing: Any = "") -> tuple[Any, ...]:
    row = []
    for column in columns:
        value = lookup(document, column)
        row.append(missing if value is MISSING else value)
    return tuple(row)


def project_page(page: Page, columns: Sequence[str], *, missing: Any = "") -> Iterator[tuple[Any, ...]]:
    """Yield one row per document, in page order."""

    for document in page:
        yield project_document(document, columns, missing=missing)


def format_cell(value: Any) -> str:
    if value is MISSING:
        return ""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, str)):
        return str(value)
    return json.dumps(value, separators=(",", ":"), default=str)


class ColumnLayout:
    """Ordered, duplicate-free list of column names shown in the results table."""

    NEW_COLUMN_PREFIX = "New Column "

    def __init__(self, columns: Iterable[str] = ()) -> None:
        self._columns: list[str] = []
        for name in columns:
            self.add(name)

    def __len__(self) -> int:
        return len(self._columns)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._columns))

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(self._columns)

    def add(self, name: str | None = None) -> int:
        """Append a column and return its position."""

        if name is None:
            number = sum(1 for column in self._columns if column.startswith(self.NEW_COLUMN_PREFIX))
            while f"{self.NEW_COLUMN_PREFIX}{number}" in self._columns:
                number += 1
            name = f"{self.NEW_COLUMN_PREFIX}{number}"
        name = self._validate(name)
        self._columns.append(name)
        return len(self._columns) - 1

    def rename(self, index: int, name: str) -> None:
        self._check_index(index)
        self._columns[index] = self._validate(name, ignore=index)

    def remove(self, index: int) -> str:
        self._check_index(index)
        return self._columns.pop(index)

    def clear(self) -> None:
        self._columns.clear()

    def move_up(self, index: int) -> int:
        """Swap with the previous column; returns the new position."""

        self._check_index(index)
        if index == 0:
            return index
        self._columns[index - 1], self._columns[index] = self._columns[index], self._columns[index - 1]
        return index - 1

    def move_down(self, index: int) -> int:
        self._check_index(index)
        if index == len(self._columns) - 1:
            return index
        self._columns[index + 1], self._columns[index] = self._columns[index], self._columns[index + 1]
        return index + 1

    def _validate(self, name: str, *, ignore: int | None = None) -> str:
        name = name.strip()
        if not name:
            raise ValueError("Column name cannot be empty.")
        for position, column in enumerate(self._columns):
            if position != ignore and column == name:
                raise ValueError(f"Column '{name}' already exists.")
        return name

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._columns):
            raise IndexError(f"No column at position {index}.")


__all__ = [
    "ColumnLayout",
    "MISSING",
    "format_cell",
    "lookup",
    "project_document",
    "project_page",
]
