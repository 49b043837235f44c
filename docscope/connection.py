"""Connection context owning the remote client and the selection hierarchy."""

from __future__ import annotations

import logging
from typing import Callable

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from .backends import ClientFactory, CosmosDocumentClient, DocumentStoreClient
from .errors import ConfigurationError, RemoteQueryError, SelectionError
from .models import QueryBatch, ResumeToken, Selection

LOG = logging.getLogger(__name__)

SelectionListener = Callable[[Selection], None]

_ENDPOINT_ADAPTER = TypeAdapter(AnyHttpUrl)


class ConnectionContext:
    """Holds the live client handle and the client -> database -> container selection."""

    def __init__(
        self,
        client_factory: ClientFactory | None = None,
        *,
        selection: Selection | None = None,
    ) -> None:
        self._client_factory = client_factory or CosmosDocumentClient
        self._client: DocumentStoreClient | None = None
        self._endpoint: str | None = None
        initial = selection or Selection()
        if initial.container_id is not None and initial.database_id is None:
            raise SelectionError("A container cannot be selected without a database.")
        self._selection = initial
        self._listeners: set[SelectionListener] = set()

    @property
    def selection(self) -> Selection:
        """Currently selected database/container."""

        return self._selection

    @property
    def endpoint(self) -> str | None:
        """Endpoint of the active client, if credentials are set."""

        return self._endpoint

    @property
    def has_client(self) -> bool:
        return self._client is not None

    async def set_credentials(self, endpoint: str, key: str) -> None:
        """Replace the client with one built from the given credentials."""

        endpoint = (endpoint or "").strip()
        key = (key or "").strip()
        if not endpoint:
            raise ConfigurationError("Account endpoint is a required field.")
        if not key:
            raise ConfigurationError("Account key is a required field.")
        try:
            _ENDPOINT_ADAPTER.validate_python(endpoint)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid endpoint URI: {endpoint}") from exc
        replacing = self._client is not None
        await self._release()
        self._client = self._client_factory(endpoint, key)
        self._endpoint = endpoint
        LOG.info("Credentials configured", extra={"endpoint": endpoint, "replaced": replacing})
        if replacing:
            self._update_selection(Selection())

    async def verify_connection(self) -> bool:
        """Return whether the configured credentials reach the server."""

        client = self._require_client()
        try:
            await client.verify()
        except RemoteQueryError as exc:
            LOG.warning("Connection check failed", extra={"endpoint": self._endpoint, "error": str(exc)})
            return False
        return True

    async def list_databases(self) -> tuple[str, ...]:
        client = self._require_client()
        return tuple([database_id async for database_id in client.list_databases()])

    async def list_containers(self) -> tuple[str, ...]:
        client = self._require_client()
        database_id = self._selection.database_id
        if database_id is None:
            raise SelectionError("No database selected.")
        return tuple([container_id async for container_id in client.list_containers(database_id)])

    def select_database(self, database_id: str) -> None:
        """Select a database; clears any selected container."""

        self._require_client()
        self._update_selection(Selection(database_id=database_id))

    def select_container(self, container_id: str) -> None:
        database_id = self._selection.database_id
        if database_id is None:
            raise SelectionError("No database selected.")
        self._update_selection(Selection(database_id=database_id, container_id=container_id))

    async def run_query(
        self,
        query: str,
        *,
        page_size: int,
        resume_token: ResumeToken | None = None,
    ) -> QueryBatch:
        """Fetch one batch of the query against the selected container."""

        client = self._require_client()
        selection = self._selection
        if selection.database_id is None or selection.container_id is None:
            raise SelectionError("No container selected.")
        return await client.run_query(
            selection.database_id,
            selection.container_id,
            query,
            page_size=page_size,
            resume_token=resume_token,
        )

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """Subscribe to selection changes; returns an unsubscribe handle."""

        self._listeners.add(listener)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    async def close(self) -> None:
        """Release the client handle."""

        await self._release()

    async def __aenter__(self) -> ConnectionContext:
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.close()

    def _require_client(self) -> DocumentStoreClient:
        if self._client is None:
            raise ConfigurationError("You must configure your credentials first.")
        return self._client

    async def _release(self) -> None:
        client, self._client = self._client, None
        self._endpoint = None
        if client is not None:
            await client.close()

    def _update_selection(self, selection: Selection) -> None:
        if selection == self._selection:
            return
        self._selection = selection
        LOG.debug("Selection changed", extra={"selection": selection.label})
        for listener in tuple(self._listeners):
            listener(selection)


__all__ = ["ConnectionContext", "SelectionListener"]
