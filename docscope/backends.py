"""Remote document store clients consumed by the connection context."""

from __future__ import annotations

from typing import AsyncIterator, Callable, Mapping, Protocol, Sequence, runtime_checkable

from azure.core.exceptions import AzureError
from azure.cosmos.aio import CosmosClient

from .errors import RemoteQueryError
from .models import Document, QueryBatch, ResumeToken


@runtime_checkable
class DocumentStoreClient(Protocol):
    """Protocol implemented by remote document store clients."""

    def list_databases(self) -> AsyncIterator[str]:
        """Yield database ids in server order."""

    def list_containers(self, database_id: str) -> AsyncIterator[str]:
        """Yield container ids of the given database."""

    async def verify(self) -> None:
        """Issue one lightweight metadata request; raise on failure."""

    async def run_query(
        self,
        database_id: str,
        container_id: str,
        query: str,
        *,
        page_size: int,
        resume_token: ResumeToken | None = None,
    ) -> QueryBatch:
        """Read the next batch of query results."""

    async def close(self) -> None:
        """Release the underlying connection."""


ClientFactory = Callable[[str, str], DocumentStoreClient]


class CosmosDocumentClient:
    """Client that talks to Azure Cosmos DB through the async SDK."""

    def __init__(self, endpoint: str, key: str) -> None:
        self._client = CosmosClient(endpoint, credential=key)

    async def list_databases(self) -> AsyncIterator[str]:
        try:
            async for database in self._client.list_databases():
                yield str(database["id"])
        except AzureError as exc:
            raise _remote_error("Failed to list databases", exc) from exc

    async def list_containers(self, database_id: str) -> AsyncIterator[str]:
        database = self._client.get_database_client(database_id)
        try:
            async for container in database.list_containers():
                yield str(container["id"])
        except AzureError as exc:
            raise _remote_error(f"Failed to list containers of '{database_id}'", exc) from exc

    async def verify(self) -> None:
        try:
            async for _ in self._client.list_databases(max_item_count=1):
                break
        except AzureError as exc:
            raise _remote_error("Connection check failed", exc) from exc

    async def run_query(
        self,
        database_id: str,
        container_id: str,
        query: str,
        *,
        page_size: int,
        resume_token: ResumeToken | None = None,
    ) -> QueryBatch:
        container = self._client.get_database_client(database_id).get_container_client(container_id)
        try:
            pages = container.query_items(query=query, max_item_count=page_size).by_page(resume_token)
            page = await anext(pages, None)
            if page is None:
                return QueryBatch(documents=())
            documents = tuple([item async for item in page])
            token = pages.continuation_token
        except AzureError as exc:
            raise _remote_error("Query failed", exc) from exc
        return QueryBatch(documents=documents, resume_token=token, has_more=token is not None)

    async def close(self) -> None:
        await self._client.close()


def _remote_error(prefix: str, exc: AzureError) -> RemoteQueryError:
    status_code = getattr(exc, "status_code", None)
    message = getattr(exc, "message", None) or str(exc)
    return RemoteQueryError(f"{prefix}: {message}", status_code=status_code)


DEMO_PRESETS: Mapping[str, Mapping[str, Sequence[Document]]] = {
    "store": {
        "products": tuple(
            {
                "id": f"product-{idx}",
                "name": f"Product {idx}",
                "price": round(4.5 + idx * 1.25, 2),
                "inStock": idx % 3 != 0,
                **({"tags": ["clearance"]} if idx % 5 == 0 else {}),
            }
            for idx in range(1, 58)
        ),
        "orders": tuple(
            {
                "id": f"order-{idx}",
                "customer": {"name": f"Customer {idx % 7}", "tier": "gold" if idx % 4 == 0 else "standard"},
                "total": idx * 10,
                **({"note": None} if idx % 6 == 0 else {}),
            }
            for idx in range(1, 31)
        ),
    },
    "telemetry": {
        "events": tuple(
            {"id": f"evt-{idx}", "type": ("click", "view", "purchase")[idx % 3], "sessionId": f"s{idx // 4}"}
            for idx in range(1, 101)
        ),
    },
}


class DemoDocumentClient:
    """Stub client serving preset documents in offset-token batches."""

    def __init__(
        self,
        presets: Mapping[str, Mapping[str, Sequence[Document]]] | None = None,
        *,
        sparse: bool = False,
    ) -> None:
        self._presets = presets if presets is not None else DEMO_PRESETS
        self._sparse = sparse
        self.closed = False

    async def list_databases(self) -> AsyncIterator[str]:
        for database_id in self._presets:
            yield database_id

    async def list_containers(self, database_id: str) -> AsyncIterator[str]:
        containers = self._presets.get(database_id)
        if containers is None:
            raise RemoteQueryError(f"Database '{database_id}' not found", status_code=404)
        for container_id in containers:
            yield container_id

    async def verify(self) -> None:
        if self.closed:
            raise RemoteQueryError("Client is closed")

    async def run_query(
        self,
        database_id: str,
        container_id: str,
        query: str,
        *,
        page_size: int,
        resume_token: ResumeToken | None = None,
    ) -> QueryBatch:
        documents = self._documents_for(database_id, container_id)
        offset, gap_pending = _parse_token(resume_token)
        # Sparse mode answers with an empty batch before every real one.
        if self._sparse and (resume_token is None or gap_pending):
            return QueryBatch(documents=(), resume_token=str(offset), has_more=True)
        batch = tuple(dict(doc) for doc in documents[offset : offset + page_size])
        next_offset = offset + len(batch)
        if next_offset >= len(documents):
            return QueryBatch(documents=batch)
        token = f"{next_offset}~" if self._sparse else str(next_offset)
        return QueryBatch(documents=batch, resume_token=token, has_more=True)

    async def close(self) -> None:
        self.closed = True

    def _documents_for(self, database_id: str, container_id: str) -> Sequence[Document]:
        containers = self._presets.get(database_id)
        if containers is None:
            raise RemoteQueryError(f"Database '{database_id}' not found", status_code=404)
        documents = containers.get(container_id)
        if documents is None:
            raise RemoteQueryError(f"Container '{container_id}' not found", status_code=404)
        return documents


def _parse_token(token: ResumeToken | None) -> tuple[int, bool]:
    if token is None:
        return 0, False
    try:
        return int(token.rstrip("~")), token.endswith("~")
    except ValueError as exc:
        raise RemoteQueryError(f"Malformed continuation token {token!r}", status_code=400) from exc


def _demo_factory(_endpoint: str, _key: str) -> DocumentStoreClient:
    return DemoDocumentClient()


CLIENT_FACTORIES: Mapping[str, ClientFactory] = {
    "cosmos": CosmosDocumentClient,
    "demo": _demo_factory,
}


def client_factory_for(backend: str) -> ClientFactory:
    """Return the client factory registered under the given backend name."""

    try:
        return CLIENT_FACTORIES[backend]
    except KeyError:
        raise ValueError(f"Unknown backend '{backend}'.") from None


__all__ = [
    "CLIENT_FACTORIES",
    "ClientFactory",
    "CosmosDocumentClient",
    "DEMO_PRESETS",
    "DemoDocumentClient",
    "DocumentStoreClient",
    "client_factory_for",
]
