"""Page router — mounts the dispatcher on a Chirp app.

Every GET path that no other route claims is handed to the
:class:`~prowl.server.dispatcher.Dispatcher`.  Two debug endpoints sit
beside the pages:

    /__prowl/stats    event-log summary and recent dispatches (JSON)
    /__prowl/routes   the client route manifest (JSON)

Handlers are annotated at runtime because Chirp resolves handler
signatures with ``eval_str=True``.
"""

import json
from dataclasses import asdict
from typing import Any

from chirp import App, Request, Response

from prowl.observability.collector import StackCollector
from prowl.observability.events import RequestDispatched
from prowl.server.dispatcher import DispatchResult, Dispatcher, is_data_request

STATS_ENDPOINT = "/__prowl/stats"
ROUTES_ENDPOINT = "/__prowl/routes"

# Catch-all path; Chirp's ``path`` converter never matches the bare root
_CATCH_ALL = "/{path:path}"


def to_response(result: DispatchResult) -> Response:
    """Convert a framework-neutral dispatch result to a Chirp response."""
    response = Response(body=result.body, status=result.status, content_type=result.content_type)
    for name, value in result.headers:
        response = response.with_header(name, value)
    return response


class PageRouter:
    """Routes every page request through the dispatcher.

    Args:
        dispatcher: Dispatcher over the loaded router state.
        app: Chirp App to register routes on (must not yet be frozen).

    """

    def __init__(self, dispatcher: Dispatcher, app: App) -> None:
        self._dispatcher = dispatcher
        self._app = app

    def register_pages(self) -> None:
        """Register ``/`` and the catch-all GET route.

        Chirp tries static segments before the catch-all, so the debug
        endpoints keep working whatever order they are registered in.
        """
        dispatcher = self._dispatcher

        async def dispatch(request: Request) -> Response:
            query = dict(request.query)
            result = await dispatcher.dispatch(
                request.path,
                data_only=is_data_request(query),
                query=query,
                request=request,
            )
            return to_response(result)

        async def root_handler(request: Request) -> Response:
            return await dispatch(request)

        async def page_handler(request: Request, path: str) -> Response:
            return await dispatch(request)

        root_handler.__name__ = "prowl_root"
        page_handler.__name__ = "prowl_page"

        self._app.route("/", methods=["GET"], name="prowl:root")(root_handler)
        self._app.route(_CATCH_ALL, methods=["GET"], name="prowl:page")(page_handler)

    def register_stats_endpoint(self, collector: StackCollector) -> None:
        """Register the ``/__prowl/stats`` JSON endpoint.

        Returns the event log summary and the most recent dispatches.

        Args:
            collector: StackCollector for accessing the event log.

        """

        async def stats_handler(request: Request) -> Response:
            recent = collector.log.query(event_type=RequestDispatched, limit=50)
            payload = json.dumps(
                {
                    "event_log": collector.log.stats(),
                    "dispatches": [asdict(event) for event in recent],
                },
                indent=2,
            )
            return Response(body=payload, status=200, content_type="application/json")

        stats_handler.__name__ = "prowl_stats"
        self._app.route(STATS_ENDPOINT, name="prowl:stats")(stats_handler)

    def register_routes_endpoint(self) -> None:
        """Register the ``/__prowl/routes`` JSON endpoint."""
        state = self._dispatcher.state

        async def routes_handler(request: Request) -> Response:
            payload: list[dict[str, Any]] = []
            for route, entry in zip(state.routes, state.get_client_manifest(), strict=True):
                payload.append({**entry.to_dict(), "renderType": route.render_type})
            return Response(
                body=json.dumps(payload, indent=2),
                status=200,
                content_type="application/json",
            )

        routes_handler.__name__ = "prowl_routes"
        self._app.route(ROUTES_ENDPOINT, name="prowl:routes")(routes_handler)
