"""App configuration loading helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

import tomllib

from pydantic import BaseModel, Field, ValidationError

CONFIG_FILE = Path.home() / ".config" / "docscope" / "config.toml"

DEFAULT_QUERY = "SELECT * FROM c"


class AppConfig(BaseModel):
    """Shape of the application configuration file."""

    theme: str = "dark"
    backend: Literal["cosmos", "demo"] = "cosmos"
    account_endpoint: str | None = None
    account_key: str | None = None
    selected_database: str | None = None
    selected_container: str | None = None
    last_query: str = DEFAULT_QUERY
    page_size: int = Field(default=25, gt=0)
    columns: list[str] = Field(default_factory=lambda: ["id"])

    @property
    def has_credentials(self) -> bool:
        return bool(self.account_endpoint and self.account_key)

    def with_credentials(self, endpoint: str, key: str) -> AppConfig:
        """Return a copy with new credentials and no selection."""

        return self.model_copy(
            update={
                "account_endpoint": endpoint,
                "account_key": key,
                "selected_database": None,
                "selected_container": None,
            }
        )

    def with_selection(self, database: str | None, container: str | None = None) -> AppConfig:
        return self.model_copy(update={"selected_database": database, "selected_container": container})

    def with_last_query(self, query: str) -> AppConfig:
        return self.model_copy(update={"last_query": query})

    def with_columns(self, columns: list[str]) -> AppConfig:
        return self.model_copy(update={"columns": list(columns)})

    def with_page_size(self, page_size: int) -> AppConfig:
        """Return a validated copy with the page size updated."""

        return AppConfig.model_validate({**self.model_dump(), "page_size": page_size})


def load_config() -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing."""

    try:
        data = _read_config_file()
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError):
        return AppConfig()

    try:
        return AppConfig(**data)
    except ValidationError:
        return AppConfig()


def save_config(config: AppConfig) -> None:
    """Persist configuration to disk."""

    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = [
        f"theme = {_quote(config.theme)}",
        f"backend = {_quote(config.backend)}",
    ]
    for key in ("account_endpoint", "account_key", "selected_database", "selected_container"):
        value = getattr(config, key)
        if value:
            lines.append(f"{key} = {_quote(value)}")
    lines.append(f"last_query = {_quote(config.last_query)}")
    lines.append(f"page_size = {config.page_size}")
    lines.append("columns = [" + ", ".join(_quote(column) for column in config.columns) + "]")
    CONFIG_FILE.write_text("\n".join(lines) + "\n")


def _quote(value: str) -> str:
    # JSON string escapes are valid TOML basic-string escapes; TOML also forbids a raw DEL.
    return json.dumps(value, ensure_ascii=False).replace("\x7f", "\\u007f")


def _read_config_file() -> dict[str, object]:
    with CONFIG_FILE.open("rb") as handle:
        raw = tomllib.load(handle)
    data: dict[str, object] = {}
    if isinstance(raw, dict):
        for key in (
            "theme",
            "backend",
            "account_endpoint",
            "account_key",
            "selected_database",
            "selected_container",
            "last_query",
        ):
            value = raw.get(key)
            if isinstance(value, str):
                data[key] = value
        page_size = raw.get("page_size")
        if isinstance(page_size, int) and not isinstance(page_size, bool):
            data["page_size"] = page_size
        columns = raw.get("columns")
        if isinstance(columns, list):
            data["columns"] = [str(column) for column in columns]
    return data
