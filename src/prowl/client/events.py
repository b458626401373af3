"""Router events — one typed channel per event kind.

Handlers run synchronously, in registration order, on the thread that sends.

    ROUTE_CHANGE_START     (url)
    ROUTE_CHANGE_COMPLETE  (url, data)   data is None after back/forward
    ROUTE_CHANGE_ERROR     (exc, url)
"""

from collections.abc import Callable
from enum import StrEnum


class RouterEvent(StrEnum):
    """Navigation lifecycle events."""

    ROUTE_CHANGE_START = "routeChangeStart"
    ROUTE_CHANGE_COMPLETE = "routeChangeComplete"
    ROUTE_CHANGE_ERROR = "routeChangeError"


class Channel[**P]:
    """An ordered list of handlers sharing one call signature."""

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: list[Callable[P, object]] = []

    def connect(self, handler: Callable[P, object]) -> None:
        self._handlers.append(handler)

    def disconnect(self, handler: Callable[P, object]) -> None:
        """Remove every registration of *handler*; unknown handlers are ignored."""
        self._handlers = [h for h in self._handlers if h != handler]

    def send(self, *args: P.args, **kwargs: P.kwargs) -> None:
        # Copy so handlers may disconnect themselves while being called
        for handler in list(self._handlers):
            handler(*args, **kwargs)

    def __len__(self) -> int:
        return len(self._handlers)
