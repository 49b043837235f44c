"""Query pager turning continuation-token batches into browsable pages."""

from __future__ import annotations

import logging
from typing import Iterator

from .cache import PageCache
from .connection import ConnectionContext
from .errors import ConfigurationError, RemoteQueryError, SelectionError
from .models import EXHAUSTED, IDLE, Document, Page, PagerPhase, PagerState, ResumeToken, Selection, paging

LOG = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25


class QueryPager:
    """Drives `start`/`load_more` against the connection context and caches pages.

    Not reentrant: callers must not overlap `start`/`load_more` calls and can
    consult `busy` to hold off while a fetch is in flight.
    """

    def __init__(self, context: ConnectionContext, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._context = context
        self._cache = PageCache()
        self._state: PagerState = IDLE
        self._query: str | None = None
        self._bound_selection: Selection | None = None
        self._busy = False
        self.page_size = page_size
        self._unsubscribe = context.subscribe(self._handle_selection_change)

    @property
    def context(self) -> ConnectionContext:
        return self._context

    @property
    def state(self) -> PagerState:
        return self._state

    @property
    def query(self) -> str | None:
        """Query text of the active result set."""

        return self._query

    @property
    def busy(self) -> bool:
        """True while a fetch cycle is awaiting the remote store."""

        return self._busy

    @property
    def has_more(self) -> bool:
        return self._state.phase is PagerPhase.PAGING

    @property
    def cache_length(self) -> int:
        return len(self._cache)

    @property
    def page_size(self) -> int:
        return self._page_size

    @page_size.setter
    def page_size(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigurationError(f"Page size must be a positive integer, got {value!r}.")
        self._page_size = value

    async def start(self, query: str) -> bool:
        """Run a new query; returns whether more results are available.

        The cache is replaced only once the first page arrives, so a failed
        query leaves the previous result set browsable.
        """

        selection = self._context.selection
        LOG.info("Starting query", extra={"selection": selection.label, "page_size": self._page_size})
        page, token = await self._fetch_cycle(query, None)
        self._cache.reset()
        self._cache.append(page)
        self._query = query
        self._bound_selection = selection
        self._state = paging(token) if token is not None else EXHAUSTED
        return self.has_more

    async def load_more(self) -> bool:
        """Fetch the next page; a no-op unless the pager is paging."""

        if self._state.phase is not PagerPhase.PAGING or self._query is None:
            return False
        page, token = await self._fetch_cycle(self._query, self._state.resume_token, bound=True)
        index = self._cache.append(page)
        self._state = paging(token) if token is not None else EXHAUSTED
        LOG.debug("Page appended", extra={"page": index, "documents": len(page), "has_more": self.has_more})
        return self.has_more

    def get_page(self, index: int) -> Page:
        """Return a cached page; never contacts the remote store."""

        return self._cache.get(index)

    def iter_pages(self) -> Iterator[Page]:
        return iter(self._cache)

    def reset(self) -> None:
        """Drop cached pages and forget the active query."""

        self._cache.reset()
        self._state = IDLE
        self._query = None
        self._bound_selection = None

    async def aclose(self) -> None:
        """Detach from the context and release its connection."""

        self._unsubscribe()
        self.reset()
        await self._context.close()

    async def _fetch_cycle(
        self, query: str, token: ResumeToken | None, *, bound: bool = False
    ) -> tuple[Page, ResumeToken | None]:
        selection = self._context.selection
        documents: list[Document] = []
        self._busy = True
        try:
            while True:
                batch = await self._context.run_query(query, page_size=self._page_size, resume_token=token)
                LOG.debug(
                    "Batch received",
                    extra={"documents": len(batch.documents), "has_more": batch.has_more},
                )
                self._check_selection(selection, bound=bound)
                documents.extend(batch.documents)
                if not batch.has_more:
                    return tuple(documents), None
                if batch.documents:
                    return tuple(documents), batch.resume_token
                token = batch.resume_token or token
        except RemoteQueryError as exc:
            LOG.warning("Fetch failed", extra={"status_code": exc.status_code, "error": exc.message})
            raise
        finally:
            self._busy = False

    def _check_selection(self, selection: Selection, *, bound: bool = False) -> None:
        current = self._context.selection
        if current == selection and (not bound or self._bound_selection == selection):
            return
        LOG.info("Selection changed mid-fetch; discarding page", extra={"selection": current.label})
        raise SelectionError("The selection changed while the query was running; results were discarded.")

    def _handle_selection_change(self, selection: Selection) -> None:
        if self._bound_selection is None or selection == self._bound_selection:
            return
        LOG.debug("Container changed; dropping cached pages", extra={"selection": selection.label})
        self.reset()


__all__ = ["DEFAULT_PAGE_SIZE", "QueryPager"]
