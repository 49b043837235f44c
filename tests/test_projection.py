"""Tests for result projection and column layout helpers."""

from __future__ import annotations

import pytest

from docscope.projection import MISSING, ColumnLayout, format_cell, lookup, project_document, project_page


def test_lookup_distinguishes_absent_from_null() -> None:
    document = {"id": "1", "note": None}

    assert lookup(document, "note") is None
    assert lookup(document, "missing") is MISSING
    assert not MISSING


def test_project_page_handles_heterogeneous_documents() -> None:
    page = (
        {"id": "1", "name": "Alice", "age": 31},
        {"id": "2", "email": "bob@example.com"},
        {"id": "3", "name": None},
    )

    rows = list(project_page(page, ["id", "name", "email"]))

    assert rows == [
        ("1", "Alice", ""),
        ("2", "", "bob@example.com"),
        ("3", None, ""),
    ]


def test_project_document_uses_custom_fallback() -> None:
    assert project_document({"id": "1"}, ["id", "total"], missing="-") == ("1", "-")
    assert project_document({"id": "1"}, []) == ()


def test_format_cell_renders_dynamic_values() -> None:
    assert format_cell(None) == "null"
    assert format_cell(True) == "true"
    assert format_cell(3.5) == "3.5"
    assert format_cell({"tier": "gold", "tags": [1, 2]}) == '{"tier":"gold","tags":[1,2]}'
    assert format_cell(MISSING) == ""


def test_column_layout_adds_named_and_placeholder_columns() -> None:
    layout = ColumnLayout(["id"])

    layout.add("name")
    layout.add()
    layout.add()

    assert layout.columns == ("id", "name", "New Column 0", "New Column 1")


def test_column_layout_rejects_duplicates() -> None:
    layout = ColumnLayout(["id", "name"])

    with pytest.raises(ValueError):
        layout.add("id")
    with pytest.raises(ValueError):
        layout.rename(1, "id")
    with pytest.raises(ValueError):
        layout.add("   ")
    layout.rename(1, "name")
    assert layout.columns == ("id", "name")


def test_column_layout_reorders_and_removes() -> None:
    layout = ColumnLayout(["id", "name", "email"])

    assert layout.move_up(2) == 1
    assert layout.columns == ("id", "email", "name")
    assert layout.move_up(0) == 0
    assert layout.move_down(2) == 2
    assert layout.move_down(0) == 1
    assert layout.columns == ("email", "id", "name")
    assert layout.remove(1) == "id"
    with pytest.raises(IndexError):
        layout.remove(5)
    layout.clear()
    assert len(layout) == 0


def test_column_layout_placeholder_skips_names_in_use() -> None:
    layout = ColumnLayout(["id"])
    layout.add()
    layout.add()
    layout.remove(1)

    assert layout.add() == 2
    assert layout.columns == ("id", "New Column 1", "New Column 2")
