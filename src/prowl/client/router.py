"""Client navigation router — cached, deduplicated page-data fetching.

Navigation never reloads the document.  ``push``/``replace`` fetch the
target page's data payload, move the session history, and announce the
change through typed event channels; the client app re-renders the page
into its existing root when ``ROUTE_CHANGE_COMPLETE`` fires.

Page data is fetched at most once per URL: a cached payload is reused
until a forced refresh, and concurrent requests for the same URL share one
in-flight task.  Failures are never cached.

Superseded navigations are not cancelled; whichever completes last wins.
"""

from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import parse_qsl, urlsplit

from prowl.client.events import Channel, RouterEvent
from prowl.client.window import POPSTATE

if TYPE_CHECKING:
    from prowl._types import PageData
    from prowl.client.window import Window


class PageDataFetcher(Protocol):
    """Fetches the data-only payload for a URL."""

    async def fetch(self, url: str) -> PageData: ...


@dataclass(frozen=True, slots=True)
class CachedPageData:
    """A fetched payload and when it arrived (epoch seconds)."""

    data: PageData
    timestamp: float


def parse_query(search: str) -> dict[str, str]:
    """``?a=1&b=2`` -> ``{"a": "1", "b": "2"}``; the last value of a key wins."""
    return dict(parse_qsl(search.lstrip("?"), keep_blank_values=True))


class ClientRouter:
    """Navigation state, page-data cache, and route-change events.

    Args:
        window: The window whose location and history are driven.
        fetcher: Fetches page data payloads.

    """

    def __init__(self, window: Window, fetcher: PageDataFetcher) -> None:
        self._window = window
        self._fetcher = fetcher
        self.pathname: str = window.location.pathname
        self.query: dict[str, str] = parse_query(window.location.search)
        self._cache: dict[str, CachedPageData] = {}
        self._pending: dict[str, asyncio.Task[PageData]] = {}
        self._background: set[asyncio.Task[None]] = set()
        self._channels: dict[RouterEvent, Channel[...]] = {event: Channel() for event in RouterEvent}
        window.add_event_listener(POPSTATE, self._on_popstate)

    # ------------------------------------------------------------------
    # Page data
    # ------------------------------------------------------------------

    @property
    def cache(self) -> dict[str, CachedPageData]:
        """Read-only view of cached payloads by URL."""
        return dict(self._cache)

    def is_pending(self, url: str) -> bool:
        return url in self._pending

    async def fetch_page_data(self, url: str, *, force: bool = False) -> PageData:
        """Return page data for *url*, fetching it at most once.

        Args:
            url: Page URL as navigated to (query included).
            force: Skip the cache.  An in-flight request is still shared.

        """
        if not force:
            cached = self._cache.get(url)
            if cached is not None:
                return cached.data

        task = self._pending.get(url)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._load(url))
            self._pending[url] = task
        # Shielded so one cancelled caller doesn't fail the others
        return await asyncio.shield(task)

    async def _load(self, url: str) -> PageData:
        try:
            data = await self._fetcher.fetch(url)
            self._cache[url] = CachedPageData(data=data, timestamp=time.time())
            return data
        finally:
            self._pending.pop(url, None)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def push(self, url: str) -> None:
        """Navigate to *url*, adding a history entry."""
        await self._navigate(url, replace=False)

    async def replace(self, url: str) -> None:
        """Navigate to *url*, replacing the current history entry."""
        await self._navigate(url, replace=True)

    async def _navigate(self, url: str, *, replace: bool) -> None:
        try:
            self.emit(RouterEvent.ROUTE_CHANGE_START, url)
            data = await self.fetch_page_data(url)

            self.pathname = urlsplit(url).path or "/"
            self.query = dict(data.get("query") or {})
            if replace:
                self._window.history.replace_state(url)
            else:
                self._window.history.push_state(url)

            self.emit(RouterEvent.ROUTE_CHANGE_COMPLETE, url, data)
        except Exception as exc:
            print(f"  prowl: navigation to {url} failed: {exc}", file=sys.stderr)
            self.emit(RouterEvent.ROUTE_CHANGE_ERROR, exc, url)

    async def prefetch(self, url: str) -> None:
        """Warm the cache for *url*; failures are reported, never raised."""
        try:
            await self.fetch_page_data(url)
        except Exception as exc:
            print(f"  prowl: prefetch of {url} failed: {exc}", file=sys.stderr)

    def prefetch_nowait(self, url: str) -> asyncio.Task[None]:
        """Schedule :meth:`prefetch` without waiting for it."""
        task = asyncio.get_running_loop().create_task(self.prefetch(url))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    def _on_popstate(self, _event: object = None) -> None:
        location = self._window.location
        self.pathname = location.pathname
        self.query = parse_query(location.search)
        self.emit(RouterEvent.ROUTE_CHANGE_COMPLETE, self.pathname + location.search, None)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: RouterEvent | str, handler: Callable[..., Any]) -> None:
        self._channels[RouterEvent(event)].connect(handler)

    def off(self, event: RouterEvent | str, handler: Callable[..., Any]) -> None:
        self._channels[RouterEvent(event)].disconnect(handler)

    def emit(self, event: RouterEvent | str, *args: Any) -> None:
        self._channels[RouterEvent(event)].send(*args)


def create_router(window: Window | None, fetcher: PageDataFetcher) -> ClientRouter | None:
    """Create the client router, or ``None`` where there is no window."""
    if window is None:
        return None
    return ClientRouter(window, fetcher)
