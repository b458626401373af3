"""Request dispatcher — answer page requests from the build's manifest.

The dispatcher is strictly two-state: an ``ssg`` route is answered from its
prerendered artifact and nothing else, an ``ssr`` route is rendered fresh on
every request.  There is no fallback between the two.

Responses per case::

    no matching route         404  themed page   | {"error": "Page not found"}
    ssg, artifact present     200  <path>.html   | {"pageProps", "query", "page"}
    ssg, artifact missing     500  themed page   | {"error": "Internal server error"}
    ssr                       200  fresh render  | {"pageProps", "query", "page"}
    ssr, render raised        500  themed page   | {"error": "Internal server error"}

Thread Safety:
    ``RouterState`` is immutable after :meth:`RouterState.load`; page
    modules are imported lazily under the registry's lock.

"""

from __future__ import annotations

import json
import re
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from prowl._errors import ManifestError
from prowl.document import SERVER_BUILD_ID
from prowl.routes.loader import PageRegistry, ServerPropsContext
from prowl.routes.manifest import MatchResult, project_client_manifest, read_manifest
from prowl.routes.paths import artifact_path, strip_query

if TYPE_CHECKING:
    from prowl._types import PageData, Params
    from prowl.document import DocumentRenderer
    from prowl.export.artifacts import ArtifactStore
    from prowl.observability.collector import StackCollector
    from prowl.routes.manifest import ClientRouteEntry, RouteEntry, RouteManifest

# Query flag selecting the data-only payload
DATA_MARKER = "_prowl_data"

CACHE_CONTROL_SSG = "public, max-age=3600"
CACHE_CONTROL_SSR = "private, no-cache, no-store, must-revalidate"

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"

NOT_FOUND_ERROR = "Page not found"
SERVER_ERROR = "Internal server error"


def is_data_request(query: dict[str, str]) -> bool:
    """Whether the query carries the data-only marker."""
    return query.get(DATA_MARKER) == "1"


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """A framework-neutral response, turned into a chirp ``Response`` by the router."""

    status: int
    body: str
    content_type: str
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def is_json(self) -> bool:
        return self.content_type == JSON_CONTENT_TYPE

    def json(self) -> Any:
        return json.loads(self.body)


class RouterState:
    """The loaded manifest plus everything derived from it at startup.

    Args:
        manifest: A built manifest (every route has a render type).
        root: Project root, used to project client component paths.
        pages_dir: Name of the pages directory under *root*.

    Raises:
        ManifestError: If a route is unresolved or its pattern is unusable.

    """

    __slots__ = ("_compiled", "_manifest", "_pages", "_pages_dir", "_root")

    def __init__(self, manifest: RouteManifest, *, root: Path, pages_dir: str = "pages") -> None:
        compiled: list[tuple[re.Pattern[str], RouteEntry]] = []
        for route in manifest.routes:
            if route.render_type is None:
                msg = f"Route {route.path!r} has no renderType. Run 'prowl build' again."
                raise ManifestError(msg)
            try:
                compiled.append((re.compile(route.pattern), route))
            except re.error as exc:
                msg = f"Route {route.path!r} has an invalid pattern {route.pattern!r}: {exc}"
                raise ManifestError(msg) from exc

        self._manifest = manifest
        self._compiled = tuple(compiled)
        self._pages = PageRegistry(manifest.routes)
        self._root = root
        self._pages_dir = pages_dir

    @classmethod
    def load(cls, manifest_path: Path, *, root: Path, pages_dir: str = "pages") -> RouterState:
        """Read and validate the persisted manifest once, at process start."""
        return cls(read_manifest(manifest_path), root=root, pages_dir=pages_dir)

    @property
    def manifest(self) -> RouteManifest:
        return self._manifest

    @property
    def routes(self) -> list[RouteEntry]:
        return list(self._manifest.routes)

    @property
    def pages(self) -> PageRegistry:
        return self._pages

    def match_route(self, url_path: str) -> MatchResult | None:
        """First route whose pattern matches *url_path* (query ignored)."""
        path = strip_query(url_path)
        for pattern, route in self._compiled:
            match = pattern.match(path)
            if match is not None:
                params = dict(zip(route.param_names, match.groups(), strict=True))
                return MatchResult(route=route, params=params)
        return None

    def get_client_manifest(self, root: Path | None = None) -> list[ClientRouteEntry]:
        """The client projection of every route, in manifest order."""
        return project_client_manifest(
            self._manifest.routes,
            root if root is not None else self._root,
            self._pages_dir,
        )


class Dispatcher:
    """Maps a request path to a response using a loaded :class:`RouterState`.

    Args:
        state: The loaded router state.
        documents: Renders SSR documents and error pages.
        store: Where SSG artifacts were written by the build.
        collector: Optional event collector.

    """

    __slots__ = ("_client_manifest", "_collector", "_documents", "_state", "_store")

    def __init__(
        self,
        state: RouterState,
        documents: DocumentRenderer,
        store: ArtifactStore,
        *,
        collector: StackCollector | None = None,
    ) -> None:
        self._state = state
        self._documents = documents
        self._store = store
        self._collector = collector
        self._client_manifest = state.get_client_manifest()

    @property
    def state(self) -> RouterState:
        return self._state

    async def dispatch(
        self,
        path: str,
        *,
        data_only: bool = False,
        query: dict[str, str] | None = None,
        request: Any = None,
    ) -> DispatchResult:
        """Answer one page request.

        Args:
            path: Request path; a query string on it is ignored.
            data_only: Return the JSON payload instead of a document.
            query: Query-string parameters (the data marker is dropped).
            request: The framework request, passed to ``get_server_props``.

        """
        start = time.perf_counter()
        url_path = strip_query(path)
        query = {k: v for k, v in (query or {}).items() if k != DATA_MARKER}

        match = self._state.match_route(url_path)
        if match is None:
            result = self._not_found(url_path, data_only)
        else:
            try:
                if match.route.render_type == "ssg":
                    result = self._serve_static(match, data_only)
                else:
                    result = await self._serve_dynamic(match, data_only, query, request)
            except Exception as exc:
                print(f"  prowl: error rendering {url_path}: {exc}", file=sys.stderr)
                result = self._server_error(url_path, data_only, exc)

        if self._collector is not None:
            self._collector.record_dispatch(
                url_path,
                route=match.route.path if match else None,
                render_type=match.route.render_type if match else None,
                data_only=data_only,
                status=result.status,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
        return result

    # ------------------------------------------------------------------
    # SSG
    # ------------------------------------------------------------------

    def _serve_static(self, match: MatchResult, data_only: bool) -> DispatchResult:
        address = artifact_path(match.route.path, match.params)
        cache = (("Cache-Control", CACHE_CONTROL_SSG),)
        if data_only:
            stored = json.loads(self._store.read(address, "json"))
            data = _page_data(
                stored.get("pageProps") or {},
                stored.get("query") or match.params,
                match.route.path,
            )
            return DispatchResult(200, json.dumps(data), JSON_CONTENT_TYPE, cache)
        html = self._store.read(address, "html")
        return DispatchResult(200, html, HTML_CONTENT_TYPE, cache)

    # ------------------------------------------------------------------
    # SSR
    # ------------------------------------------------------------------

    async def _serve_dynamic(
        self,
        match: MatchResult,
        data_only: bool,
        query: dict[str, str],
        request: Any,
    ) -> DispatchResult:
        module = self._state.pages.get(match.route)
        context = ServerPropsContext(request=request, params=dict(match.params), query=query)
        props = await module.server_props(context)
        cache = (("Cache-Control", CACHE_CONTROL_SSR),)

        if data_only:
            data = _page_data(props, match.params, match.route.path)
            return DispatchResult(200, json.dumps(data), JSON_CONTENT_TYPE, cache)

        html = self._documents.page(
            module.component,
            props,
            page=match.route.path,
            query=match.params,
            build_id=SERVER_BUILD_ID,
            manifest=self._client_manifest,
            gssp=True,
        )
        return DispatchResult(200, html, HTML_CONTENT_TYPE, cache)

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _not_found(self, url_path: str, data_only: bool) -> DispatchResult:
        if data_only:
            return DispatchResult(404, json.dumps({"error": NOT_FOUND_ERROR}), JSON_CONTENT_TYPE)
        return DispatchResult(404, self._documents.not_found(url_path), HTML_CONTENT_TYPE)

    def _server_error(self, url_path: str, data_only: bool, exc: Exception) -> DispatchResult:
        if data_only:
            return DispatchResult(500, json.dumps({"error": SERVER_ERROR}), JSON_CONTENT_TYPE)
        return DispatchResult(
            500,
            self._documents.server_error(url_path, str(exc)),
            HTML_CONTENT_TYPE,
        )


def _page_data(page_props: dict[str, Any], query: Params, page: str) -> PageData:
    return {"pageProps": page_props, "query": dict(query), "page": page}
