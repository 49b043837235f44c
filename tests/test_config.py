"""Tests for AppConfig helpers."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from docscope import config as config_module
from docscope.config import DEFAULT_QUERY, AppConfig, load_config, save_config


def test_defaults_match_first_run_settings() -> None:
    config = AppConfig()

    assert config.last_query == DEFAULT_QUERY
    assert config.page_size == 25
    assert config.columns == ["id"]
    assert config.has_credentials is False


def test_load_config_returns_defaults_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.toml")

    result = load_config()

    assert result == AppConfig()


def test_load_config_reads_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
theme = "light"
backend = "demo"
account_endpoint = "https://localhost:8081/"
account_key = "c2VjcmV0"
selected_database = "store"
selected_container = "orders"
last_query = "SELECT c.id FROM c"
page_size = 50
columns = ["id", "total"]
"""
    )
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result.theme == "light"
    assert result.backend == "demo"
    assert result.has_credentials is True
    assert result.selected_database == "store"
    assert result.selected_container == "orders"
    assert result.last_query == "SELECT c.id FROM c"
    assert result.page_size == 50
    assert result.columns == ["id", "total"]


def test_load_config_handles_toml_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("theme = [unterminated")
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    assert load_config() == AppConfig()


def test_load_config_rejects_invalid_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('page_size = 0\nbackend = "demo"\n')
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    assert load_config() == AppConfig()


def test_save_config_round_trips_quoted_queries(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "nested" / "config.toml"
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)
    config = AppConfig(
        backend="demo",
        account_endpoint="https://localhost:8081/",
        account_key="a+b/c==",
        selected_database="store",
        selected_container="orders",
        last_query='SELECT * FROM c WHERE c.Type = "message"\nORDER BY c.Content',
        page_size=10,
        columns=["id", "customer"],
    )

    save_config(config)

    content = config_path.read_text()
    assert 'selected_container = "orders"' in content
    assert "page_size = 10" in content
    assert load_config() == config


def test_save_config_escapes_control_characters(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.toml")
    config = AppConfig(last_query="SELECT * FROM c WHERE c.sep = \"\x7f\x01\"", columns=["id", "tab\tname"])

    save_config(config)

    assert "\x7f" not in (tmp_path / "config.toml").read_text()
    assert load_config() == config


def test_with_credentials_clears_selection() -> None:
    config = AppConfig(selected_database="store", selected_container="orders")

    updated = config.with_credentials("https://localhost:8081/", "key")

    assert updated.has_credentials is True
    assert updated.selected_database is None
    assert updated.selected_container is None
    assert config.selected_database == "store"


def test_with_helpers_return_updated_copies() -> None:
    config = AppConfig()

    assert config.with_selection("store").selected_container is None
    assert config.with_selection("store", "orders").selected_container == "orders"
    assert config.with_last_query("SELECT 1").last_query == "SELECT 1"
    assert config.with_columns(["id", "name"]).columns == ["id", "name"]
    assert config.with_page_size(5).page_size == 5
    with pytest.raises(ValidationError):
        config.with_page_size(0)
