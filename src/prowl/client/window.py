"""Browser window surface the client router depends on.

The router only touches ``location``, ``history`` and ``popstate``
listeners.  :class:`HeadlessWindow` provides those in memory so the
navigation layer runs outside a browser (tests, crawlers, prefetch tools).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import urlsplit

POPSTATE = "popstate"


class History(Protocol):
    def push_state(self, url: str) -> None: ...

    def replace_state(self, url: str) -> None: ...


class Location(Protocol):
    pathname: str
    search: str


class Window(Protocol):
    location: Location
    history: History

    def add_event_listener(self, event: str, handler: Callable[..., Any]) -> None: ...


@dataclass(slots=True)
class MemoryLocation:
    pathname: str = "/"
    search: str = ""

    def assign(self, url: str) -> None:
        parts = urlsplit(url)
        self.pathname = parts.path or "/"
        self.search = f"?{parts.query}" if parts.query else ""

    @property
    def href(self) -> str:
        return self.pathname + self.search


class MemoryHistory:
    """Session history as a list of URLs plus a cursor.

    ``back``/``forward`` move the cursor, update the location, and fire
    ``popstate`` on the owning window, like a browser does.
    """

    __slots__ = ("_entries", "_index", "_window")

    def __init__(self, window: HeadlessWindow, url: str) -> None:
        self._window = window
        self._entries: list[str] = [url]
        self._index = 0

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    @property
    def length(self) -> int:
        return len(self._entries)

    @property
    def current(self) -> str:
        return self._entries[self._index]

    def push_state(self, url: str) -> None:
        # A push drops any forward entries
        del self._entries[self._index + 1:]
        self._entries.append(url)
        self._index += 1
        self._window.location.assign(url)

    def replace_state(self, url: str) -> None:
        self._entries[self._index] = url
        self._window.location.assign(url)

    def back(self) -> None:
        self.go(-1)

    def forward(self) -> None:
        self.go(1)

    def go(self, delta: int) -> None:
        target = self._index + delta
        if delta == 0 or not 0 <= target < len(self._entries):
            return
        self._index = target
        self._window.location.assign(self._entries[target])
        self._window.dispatch_event(POPSTATE)


@dataclass(slots=True)
class HeadlessWindow:
    """In-memory window with a location, session history, and listeners.

    Args:
        url: Initial URL (path plus optional query).

    """

    url: str = "/"
    location: MemoryLocation = field(init=False)
    history: MemoryHistory = field(init=False)
    _listeners: dict[str, list[Callable[..., Any]]] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        self.location = MemoryLocation()
        self.location.assign(self.url)
        self.history = MemoryHistory(self, self.location.href)

    def add_event_listener(self, event: str, handler: Callable[..., Any]) -> None:
        self._listeners.setdefault(event, []).append(handler)

    def remove_event_listener(self, event: str, handler: Callable[..., Any]) -> None:
        handlers = self._listeners.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def dispatch_event(self, event: str) -> None:
        for handler in list(self._listeners.get(event, [])):
            handler(event)
