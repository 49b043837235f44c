"""Error types raised by the browsing core."""

from __future__ import annotations


class DocscopeError(RuntimeError):
    """Base class for errors surfaced to the UI."""


class ConfigurationError(DocscopeError):
    """Raised when no client is configured or credentials are malformed."""


class SelectionError(DocscopeError):
    """Raised when a database/container is required but not selected."""


class RemoteQueryError(DocscopeError):
    """Raised when the remote store rejects a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"RemoteQueryError({self.message!r}, status_code={self.status_code!r})"


class NotFoundError(DocscopeError, LookupError):
    """Raised when a page index is outside the fetched range."""


__all__ = [
    "ConfigurationError",
    "DocscopeError",
    "NotFoundError",
    "RemoteQueryError",
    "SelectionError",
]
