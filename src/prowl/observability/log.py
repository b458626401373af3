"""Event log — a bounded, locked ring buffer of build and serve events.

Besides filtered queries, the log summarizes dispatches for the
``/__prowl/stats`` endpoint: requests per render type, per status class,
and the mean dispatch time.

Thread Safety:
    Every read and write takes the log's ``threading.Lock``.  Pounce
    workers append concurrently; readers get snapshots.

"""

import threading
from collections import Counter, deque
from collections.abc import Iterable
from typing import Any

from prowl.observability.events import RequestDispatched


def _event_paths(event: Any) -> tuple[str, ...]:
    """Request path and matched route of *event*, whichever it carries."""
    return tuple(p for p in (getattr(event, "path", None), getattr(event, "route", None)) if p)


class EventLog:
    """Most recent events, oldest dropped first once ``max_events`` is hit.

    Pounce lifecycle events share the buffer with prowl's own events.

    Args:
        max_events: Capacity of the ring buffer.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._events: deque[Any] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: Any) -> None:
        with self._lock:
            self._events.append(event)

    def append_many(self, events: Iterable[Any]) -> None:
        with self._lock:
            self._events.extend(events)

    def _snapshot(self) -> list[Any]:
        with self._lock:
            return list(self._events)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        path: str | None = None,
        status: int | None = None,
        limit: int = 100,
    ) -> list[Any]:
        """Newest-first events matching every given filter.

        Args:
            event_type: Keep only instances of this class.
            since_ns: Keep only events stamped at or after this time.
            path: Substring of the event's request path or route path.
            status: Keep only dispatches answered with this status.
            limit: Stop after this many matches.

        """
        matches: list[Any] = []
        for event in reversed(self._snapshot()):
            if len(matches) >= limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if since_ns and getattr(event, "timestamp_ns", 0) < since_ns:
                continue
            if path is not None and not any(path in p for p in _event_paths(event)):
                continue
            if status is not None and getattr(event, "status", None) != status:
                continue
            matches.append(event)
        return matches

    def recent(self, n: int = 20) -> list[Any]:
        """The last *n* events, oldest first."""
        return self._snapshot()[-n:]

    def clear(self) -> int:
        """Drop every event; returns how many were dropped."""
        with self._lock:
            dropped = len(self._events)
            self._events.clear()
        return dropped

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Buffer usage, events per type, and a dispatch summary."""
        events = self._snapshot()
        dispatches = [e for e in events if isinstance(e, RequestDispatched)]

        summary: dict[str, Any] = {
            "total": len(events),
            "max_events": self._max_events,
            "by_type": dict(Counter(type(e).__name__ for e in events)),
        }
        if dispatches:
            summary["dispatch"] = {
                "by_render_type": dict(Counter(e.render_type or "none" for e in dispatches)),
                "by_status": dict(Counter(f"{e.status // 100}xx" for e in dispatches)),
                "mean_ms": round(sum(e.duration_ms for e in dispatches) / len(dispatches), 3),
            }
        return summary
