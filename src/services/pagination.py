"""Paginated fetching for infinite-scroll and "Load More" surfaces.

``PageAccumulator`` owns the cursor for one listing. Each request is keyed
by the accumulator generation and the listing parameters at issue time, so
a response that arrives after ``reset()`` is dropped instead of being
appended to the new listing.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable

from src.services.gateway import DataGateway, Query

logger = logging.getLogger(__name__)

# fetch_page(params, start, end) -> records in [start, end] (inclusive)
PageFetcher = Callable[[Any, int, int], list]


@dataclass(frozen=True)
class _Ticket:
    key: tuple
    params: Any
    start: int
    end: int


class PageAccumulator:
    """Accumulates successive pages of one listing into a flat sequence."""

    def __init__(self, fetch_page: PageFetcher, page_size: int, params: Hashable = None):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._fetch_page = fetch_page
        self.page_size = page_size
        self.params = params
        self._generation = 0
        self.pages: list[list] = []
        self.cursor = 0
        self.has_more = True
        self.in_flight = False

    @property
    def items(self) -> list:
        """All fetched records, in request order."""
        return [record for page in self.pages for record in page]

    @property
    def key(self) -> tuple:
        return (self._generation, self.params)

    def reset(self, params: Hashable = None) -> None:
        """Start over with *params*; accumulated pages are discarded."""
        self._generation += 1
        self.params = params
        self.pages = []
        self.cursor = 0
        self.has_more = True
        self.in_flight = False
        logger.debug("Accumulator reset with params=%r", params)

    def _begin(self) -> _Ticket | None:
        if self.in_flight:
            logger.debug("Page request already in flight, ignoring load_next")
            return None
        if not self.has_more:
            return None
        start = self.cursor * self.page_size
        self.in_flight = True
        return _Ticket(self.key, self.params, start, start + self.page_size - 1)

    def _complete(self, ticket: _Ticket, page: list) -> list | None:
        if ticket.key != self.key:
            logger.debug("Discarding stale page for params=%r", ticket.params)
            return None
        page = list(page or [])
        self.pages.append(page)
        self.cursor += 1
        # An exactly page-sized final page reports has_more until the next fetch
        self.has_more = len(page) == self.page_size
        self.in_flight = False
        return page

    def _abort(self, ticket: _Ticket) -> None:
        if ticket.key == self.key:
            self.in_flight = False

    def load_next(self) -> list | None:
        """Fetch and append the next page.

        Returns the new page, ``[]`` when the listing is exhausted, or None
        when the call was ignored (request already in flight) or the
        response went stale.
        """
        if not self.has_more and not self.in_flight:
            return []
        ticket = self._begin()
        if ticket is None:
            return None
        try:
            page = self._fetch_page(ticket.params, ticket.start, ticket.end)
        except Exception:
            self._abort(ticket)
            raise
        return self._complete(ticket, page)

    async def load_next_async(self) -> list | None:
        """Same as ``load_next`` but runs the fetch off the event loop."""
        if not self.has_more and not self.in_flight:
            return []
        ticket = self._begin()
        if ticket is None:
            return None
        loop = asyncio.get_running_loop()
        try:
            page = await loop.run_in_executor(
                None, self._fetch_page, ticket.params, ticket.start, ticket.end,
            )
        except Exception:
            self._abort(ticket)
            raise
        return self._complete(ticket, page)


def collection_accumulator(
    gateway: DataGateway, collection: str, query: Query, page_size: int,
) -> PageAccumulator:
    """Accumulator over ``gateway.fetch(collection, query.page(...))``.

    The query itself is the listing parameter: ``reset(new_query)``
    switches filters.
    """
    def fetch_page(q: Query, start: int, end: int) -> list:
        return gateway.fetch(collection, q.page(start, end))

    return PageAccumulator(fetch_page, page_size, params=query)


class LatestRequest:
    """Runs a one-shot fetch off the event loop and keeps only the newest result.

    Every ``load`` call takes a new token. When an older call resolves after a
    newer one was issued, its result (or error) is dropped and None returned.
    """

    def __init__(self, fetch: Callable[..., Any]):
        self._fetch = fetch
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    async def load(self, *args) -> Any:
        self._generation += 1
        token = self._generation
        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, self._fetch, *args)
        except Exception:
            if not self.is_current(token):
                logger.debug("Discarding stale failure for args=%r", args)
                return None
            raise
        if not self.is_current(token):
            logger.debug("Discarding stale response for args=%r", args)
            return None
        return result


class VisibilityWindow:
    """Client-side "show more" windows over already fetched lists, per tab."""

    def __init__(self, step: int = 6):
        self.step = step
        self._visible: dict[str, int] = {}

    def limit(self, tab: str) -> int:
        return self._visible.get(tab, self.step)

    def visible(self, tab: str, items: list) -> list:
        return items[: self.limit(tab)]

    def has_more(self, tab: str, items: list) -> bool:
        return len(items) > self.limit(tab)

    def show_more(self, tab: str) -> int:
        self._visible[tab] = self.limit(tab) + self.step
        return self._visible[tab]

    def reset(self, tab: str | None = None) -> None:
        if tab is None:
            self._visible.clear()
        else:
            self._visible.pop(tab, None)
