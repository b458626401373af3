"""Observability — build and serve events in one bounded log.

The build records what it scanned, how each route was settled and which
artifacts it wrote; the server records every dispatched request.  Pounce
connection lifecycle events land in the same log because
:class:`StackCollector` doubles as Pounce's ``lifecycle_collector``::

    collector = StackCollector(EventLog())
    collector.record_dispatch("/blog/1", route="/blog/:id", render_type="ssg",
                              data_only=False, status=200)
    collector.log.stats()["dispatch"]["by_render_type"]   # {"ssg": 1}

"""

from prowl.observability.collector import StackCollector
from prowl.observability.events import (
    ArtifactWritten,
    PagesScanned,
    RequestDispatched,
    RouteResolved,
    StackEvent,
    now_ns,
)
from prowl.observability.log import EventLog

__all__ = [
    "ArtifactWritten",
    "EventLog",
    "PagesScanned",
    "RequestDispatched",
    "RouteResolved",
    "StackCollector",
    "StackEvent",
    "now_ns",
]
