"""Stack collector — bridges Pounce lifecycle events into prowl's event log.

Implements Pounce's ``LifecycleCollector`` protocol so it can be passed
directly to Pounce workers.  Also provides methods for recording build and
dispatch events.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe for concurrent use from multiple Pounce worker threads.

"""

from typing import Any

from prowl._types import RenderType
from prowl.observability.events import (
    ArtifactWritten,
    PagesScanned,
    RequestDispatched,
    RouteResolved,
    now_ns,
)
from prowl.observability.log import EventLog


class StackCollector:
    """Unified event collector for the build and the server.

    Implements Pounce's ``LifecycleCollector`` protocol (duck-typed) so
    it can be injected into Pounce workers as the lifecycle collector.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Pounce LifecycleCollector protocol -----

    def record(self, event: Any) -> None:
        """Record a Pounce lifecycle event.

        Implements the ``LifecycleCollector.record()`` protocol.
        Pounce events are stored directly since they are frozen dataclasses.

        """
        self._log.append(event)

    # ----- Build events -----

    def record_scan(
        self,
        path: str,
        *,
        pages: int = 0,
        dynamic: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a pages-directory scan."""
        self._log.append(
            PagesScanned(
                path=path,
                pages=pages,
                dynamic=dynamic,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_resolution(
        self,
        path: str,
        render_type: RenderType,
        kind: str,
        *,
        reason: str = "",
        count: int = 0,
    ) -> None:
        """Record a route's resolved render mode."""
        self._log.append(
            RouteResolved(
                path=path,
                render_type=render_type,
                kind=kind,
                reason=reason,
                count=count,
                timestamp_ns=now_ns(),
            )
        )

    def record_artifact(self, path: str, target: str, *, size_bytes: int = 0) -> None:
        """Record one written artifact file."""
        self._log.append(
            ArtifactWritten(
                path=path,
                target=target,
                size_bytes=size_bytes,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Serve events -----

    def record_dispatch(
        self,
        path: str,
        *,
        route: str | None,
        render_type: RenderType | None,
        data_only: bool,
        status: int,
        duration_ms: float = 0.0,
    ) -> None:
        """Record one dispatched page request."""
        self._log.append(
            RequestDispatched(
                path=path,
                route=route,
                render_type=render_type,
                data_only=data_only,
                status=status,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )
