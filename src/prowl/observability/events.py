"""Event model for build and serve observability.

Pounce lifecycle events are reused directly from ``pounce.lifecycle``; the
events below cover what prowl itself does.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass

from prowl._types import RenderType

# ---------------------------------------------------------------------------
# Build events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PagesScanned:
    """The pages directory was scanned and compiled.

    Attributes:
        path: Absolute path to the pages directory.
        pages: Number of page files found.
        dynamic: How many of them are dynamic routes.
        duration_ms: Time spent scanning and compiling.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    pages: int
    dynamic: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RouteResolved:
    """The build settled a route's render mode.

    Attributes:
        path: Route path (``/blog/:id``).
        render_type: The frozen mode.
        kind: Disposition kind (``ssg-pure``, ``declined``, ...).
        reason: Why the route was declined or failed, else empty.
        count: Number of artifact pairs written.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    render_type: RenderType
    kind: str
    reason: str
    count: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ArtifactWritten:
    """One prerendered file was written.

    Attributes:
        path: Artifact address (``/blog/1``).
        target: Absolute output file path.
        size_bytes: Bytes written.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    target: str
    size_bytes: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Serve events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RequestDispatched:
    """The dispatcher answered a page request.

    Attributes:
        path: Request path (query excluded).
        route: Matched route path, or ``None`` for a 404.
        render_type: Mode of the matched route, if any.
        data_only: Whether the data-only payload was requested.
        status: HTTP status of the response.
        duration_ms: Time spent dispatching.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    route: str | None
    render_type: RenderType | None
    data_only: bool
    status: int
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type StackEvent = PagesScanned | RouteResolved | ArtifactWritten | RequestDispatched


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
