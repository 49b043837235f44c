"""Tests for the remote document store clients."""

from __future__ import annotations

from typing import Any

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError

from docscope.backends import (
    CosmosDocumentClient,
    DemoDocumentClient,
    DocumentStoreClient,
    client_factory_for,
)
from docscope.connection import ConnectionContext
from docscope.errors import RemoteQueryError
from docscope.pager import QueryPager

PRESETS = {"shop": {"items": tuple({"id": str(idx)} for idx in range(5)), "empty": ()}}


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.mark.anyio
async def test_demo_client_slices_documents_by_token() -> None:
    client = DemoDocumentClient(PRESETS)

    first = await client.run_query("shop", "items", "SELECT * FROM c", page_size=2)
    second = await client.run_query("shop", "items", "SELECT * FROM c", page_size=2, resume_token=first.resume_token)
    last = await client.run_query("shop", "items", "SELECT * FROM c", page_size=4, resume_token=second.resume_token)

    assert [doc["id"] for doc in first.documents] == ["0", "1"]
    assert first.has_more is True
    assert [doc["id"] for doc in second.documents] == ["2", "3"]
    assert [doc["id"] for doc in last.documents] == ["4"]
    assert last.has_more is False
    assert last.resume_token is None


@pytest.mark.anyio
async def test_demo_client_reports_unknown_container() -> None:
    client = DemoDocumentClient(PRESETS)

    with pytest.raises(RemoteQueryError) as excinfo:
        await client.run_query("shop", "missing", "SELECT * FROM c", page_size=2)

    assert excinfo.value.status_code == 404


@pytest.mark.anyio
async def test_pager_skips_sparse_demo_batches() -> None:
    context = ConnectionContext(lambda _endpoint, _key: DemoDocumentClient(PRESETS, sparse=True))
    await context.set_credentials("https://localhost:8081/", "key")
    context.select_database("shop")
    context.select_container("items")
    pager = QueryPager(context, page_size=2)

    more = await pager.start("SELECT * FROM c")
    while more:
        more = await pager.load_more()

    assert [len(page) for page in pager.iter_pages()] == [2, 2, 1]


@pytest.mark.anyio
async def test_pager_returns_single_empty_page_for_empty_container() -> None:
    context = ConnectionContext(lambda _endpoint, _key: DemoDocumentClient(PRESETS, sparse=True))
    await context.set_credentials("https://localhost:8081/", "key")
    context.select_database("shop")
    context.select_container("empty")
    pager = QueryPager(context, page_size=2)

    assert await pager.start("SELECT * FROM c") is False
    assert pager.get_page(0) == ()


@pytest.mark.anyio
async def test_demo_client_lists_presets() -> None:
    client = DemoDocumentClient(PRESETS)

    databases = [database async for database in client.list_databases()]
    containers = [container async for container in client.list_containers("shop")]

    assert databases == ["shop"]
    assert containers == ["items", "empty"]
    assert isinstance(client, DocumentStoreClient)


def test_client_factory_for_known_backends() -> None:
    assert client_factory_for("cosmos") is CosmosDocumentClient
    assert isinstance(client_factory_for("demo")("https://localhost:8081/", "key"), DemoDocumentClient)
    with pytest.raises(ValueError):
        client_factory_for("mongo")


class _AsyncItems:
    def __init__(self, items: list[Any]) -> None:
        self._items = list(items)

    def __aiter__(self) -> "_AsyncItems":
        return self

    async def __anext__(self) -> Any:
        if not self._items:
            raise StopAsyncIteration
        return self._items.pop(0)


class _FakePages:
    def __init__(self, pages: list[list[dict[str, Any]]], token: str | None) -> None:
        self._pages = pages
        self._token = token
        self.continuation_token: str | None = None

    def __aiter__(self) -> "_FakePages":
        return self

    async def __anext__(self) -> _AsyncItems:
        if not self._pages:
            raise StopAsyncIteration
        self.continuation_token = self._token
        return _AsyncItems(self._pages.pop(0))


class _FakeItemPaged:
    def __init__(self, owner: "_FakeCosmosClient", query: str, max_item_count: int) -> None:
        self._owner = owner
        self._query = query
        self._max_item_count = max_item_count

    def by_page(self, continuation_token: str | None = None) -> _FakePages:
        self._owner.requests.append((self._query, self._max_item_count, continuation_token))
        if self._owner.error is not None:
            raise self._owner.error
        return _FakePages(list(self._owner.pages), self._owner.next_token)


class _FakeContainer:
    def __init__(self, owner: "_FakeCosmosClient") -> None:
        self._owner = owner

    def query_items(self, query: str, max_item_count: int) -> _FakeItemPaged:
        return _FakeItemPaged(self._owner, query, max_item_count)


class _FakeDatabase:
    def __init__(self, owner: "_FakeCosmosClient", database_id: str) -> None:
        self._owner = owner
        self._database_id = database_id

    def get_container_client(self, container_id: str) -> _FakeContainer:
        self._owner.targets.append((self._database_id, container_id))
        return _FakeContainer(self._owner)

    async def list_containers(self):  # type: ignore[no-untyped-def]
        for container_id in ("open", "archived"):
            yield {"id": container_id}


class _FakeCosmosClient:
    instances: list["_FakeCosmosClient"] = []

    def __init__(self, url: str, credential: str) -> None:
        self.url = url
        self.credential = credential
        self.pages: list[list[dict[str, Any]]] = [[{"id": "1"}, {"id": "2"}]]
        self.next_token: str | None = "ct-1"
        self.error: Exception | None = None
        self.requests: list[tuple[str, int, str | None]] = []
        self.targets: list[tuple[str, str]] = []
        self.closed = False
        _FakeCosmosClient.instances.append(self)

    async def list_databases(self, max_item_count: int | None = None):  # type: ignore[no-untyped-def]
        if self.error is not None:
            raise self.error
        for database_id in ("orders", "telemetry"):
            yield {"id": database_id}

    def get_database_client(self, database_id: str) -> _FakeDatabase:
        return _FakeDatabase(self, database_id)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_cosmos(monkeypatch: pytest.MonkeyPatch) -> type[_FakeCosmosClient]:
    _FakeCosmosClient.instances = []
    monkeypatch.setattr("docscope.backends.CosmosClient", _FakeCosmosClient)
    return _FakeCosmosClient


@pytest.mark.anyio
async def test_cosmos_client_reads_one_page_and_its_token(fake_cosmos: type[_FakeCosmosClient]) -> None:
    client = CosmosDocumentClient("https://example.documents.azure.com/", "secret")
    sdk = fake_cosmos.instances[0]

    batch = await client.run_query("orders", "open", "SELECT * FROM c", page_size=2, resume_token="ct-0")

    assert batch.documents == ({"id": "1"}, {"id": "2"})
    assert batch.resume_token == "ct-1"
    assert batch.has_more is True
    assert sdk.requests == [("SELECT * FROM c", 2, "ct-0")]
    assert sdk.targets == [("orders", "open")]
    assert sdk.credential == "secret"


@pytest.mark.anyio
async def test_cosmos_client_reports_end_of_results(fake_cosmos: type[_FakeCosmosClient]) -> None:
    client = CosmosDocumentClient("https://example.documents.azure.com/", "secret")
    sdk = fake_cosmos.instances[0]
    sdk.next_token = None

    batch = await client.run_query("orders", "open", "SELECT * FROM c", page_size=2)
    sdk.pages = []
    empty = await client.run_query("orders", "open", "SELECT * FROM c", page_size=2)

    assert batch.has_more is False
    assert empty.documents == ()
    assert empty.has_more is False


@pytest.mark.anyio
async def test_cosmos_client_wraps_sdk_errors(fake_cosmos: type[_FakeCosmosClient]) -> None:
    client = CosmosDocumentClient("https://example.documents.azure.com/", "secret")
    fake_cosmos.instances[0].error = CosmosHttpResponseError(status_code=400, message="Syntax error near 'FORM'")

    with pytest.raises(RemoteQueryError) as excinfo:
        await client.run_query("orders", "open", "SELECT * FORM c", page_size=2)
    assert excinfo.value.status_code == 400
    assert "Syntax error" in str(excinfo.value)

    with pytest.raises(RemoteQueryError):
        await client.verify()


@pytest.mark.anyio
async def test_cosmos_client_lists_and_closes(fake_cosmos: type[_FakeCosmosClient]) -> None:
    client = CosmosDocumentClient("https://example.documents.azure.com/", "secret")

    databases = [database async for database in client.list_databases()]
    containers = [container async for container in client.list_containers("orders")]
    await client.verify()
    await client.close()

    assert databases == ["orders", "telemetry"]
    assert containers == ["open", "archived"]
    assert fake_cosmos.instances[0].closed is True
