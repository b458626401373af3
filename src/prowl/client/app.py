"""Client app — hydrate once, then re-render into the same root on navigation.

The initial document carries a data block (see :mod:`prowl.document`)
naming the page, its props, and the client route manifest.  Hydration
resolves the page's component through the loader map, creates the single
:class:`RenderRoot`, and subscribes to ``ROUTE_CHANGE_COMPLETE`` so every
later navigation renders into that same root.

Loader-map keys are ``PAGE_ROOT_TOKEN + component_path``, e.g.
``pages/blog/[id].py`` for the route ``/blog/:id``.
"""

from __future__ import annotations

import asyncio
import re
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from prowl._errors import ClientError
from prowl.client.events import RouterEvent
from prowl.document import MOUNT_ID, read_data_block
from prowl.routes.compiler import scan_pages
from prowl.routes.loader import load_page_module
from prowl.routes.manifest import ClientRouteEntry
from prowl.routes.paths import strip_query, wildcard_pattern

if TYPE_CHECKING:
    from prowl._types import LoaderMap, PageData, Props
    from prowl.client.router import ClientRouter
    from prowl.document import ComponentRenderer
    from prowl.routes.loader import PageModule

# Prefix joining the page root to a client component path
PAGE_ROOT_TOKEN = "pages"


def resolve_client_route(page: str, manifest: list[ClientRouteEntry]) -> ClientRouteEntry:
    """Find the manifest entry for *page* (a route path or a concrete URL).

    An exact path match wins; otherwise the first dynamic route whose
    single-segment wildcard pattern matches.

    Raises:
        ClientError: If no route matches.

    """
    path = strip_query(page)
    for entry in manifest:
        if entry.path == path:
            return entry
    for entry in manifest:
        if entry.is_dynamic and re.match(wildcard_pattern(entry.path), path):
            return entry
    msg = f"No client route matches {page!r}"
    raise ClientError(msg)


def build_loader_map(pages_dir: Path) -> dict[str, Callable[[], Awaitable[PageModule]]]:
    """Filesystem-backed loader map for running the client without a bundler.

    Each loader imports its page module on first call and reuses it after.
    """
    root = Path(pages_dir).resolve()
    loaders: dict[str, Callable[[], Awaitable[PageModule]]] = {}

    for page in scan_pages(root):
        key = PAGE_ROOT_TOKEN + "/" + page.file_path.relative_to(root).as_posix()
        loaders[key] = _module_loader(page.file_path)
    return loaders


def _module_loader(page_file: Path) -> Callable[[], Awaitable[PageModule]]:
    loaded: list[PageModule] = []

    async def load() -> PageModule:
        if not loaded:
            loaded.append(load_page_module(page_file))
        return loaded[0]

    return load


class RenderRoot:
    """The one place pages are rendered into.

    Holds the current component, its props, and the resulting markup.
    """

    __slots__ = ("_renderer", "component", "markup", "mount_id", "props", "render_count")

    def __init__(self, renderer: ComponentRenderer, mount_id: str) -> None:
        self._renderer = renderer
        self.mount_id = mount_id
        self.component: Any = None
        self.props: Props = {}
        self.markup = ""
        self.render_count = 0

    def render(self, component: Any, props: Props) -> str:
        self.markup = self._renderer.render(component, props)
        self.component = component
        self.props = dict(props)
        self.render_count += 1
        return self.markup


class ClientApp:
    """Owns hydration, component loading, and the single render root.

    Args:
        document: The initial HTML document (with its data block).
        loaders: Loader map keyed by ``PAGE_ROOT_TOKEN + component_path``.
        renderer: Renders components to markup.
        router: The client router, or ``None`` without a window.

    """

    def __init__(
        self,
        document: str,
        *,
        loaders: LoaderMap,
        renderer: ComponentRenderer,
        router: ClientRouter | None = None,
    ) -> None:
        self._document = document
        self._loaders = loaders
        self._renderer = renderer
        self._router = router
        self._root: RenderRoot | None = None
        self._mounting = False
        self._manifest: list[ClientRouteEntry] = []
        self._initial: dict[str, Any] = {}
        self._renders: set[asyncio.Task[None]] = set()

    @property
    def root(self) -> RenderRoot | None:
        return self._root

    @property
    def manifest(self) -> list[ClientRouteEntry]:
        return list(self._manifest)

    @property
    def initial_data(self) -> dict[str, Any]:
        """The parsed data block (empty before hydration)."""
        return dict(self._initial)

    async def hydrate(self) -> RenderRoot:
        """Read the data block, render the page, and create the render root.

        Raises:
            ClientError: If the app was already hydrated, or the page's
                component cannot be resolved.
            RenderError: If the document has no valid data block.

        """
        if self._root is not None or self._mounting:
            msg = "Render root already exists; hydrate() runs once per document"
            raise ClientError(msg)

        # Claimed before the first await so overlapping calls cannot both mount
        self._mounting = True
        try:
            data = read_data_block(self._document)
            manifest = data.get("manifest")
            if not isinstance(manifest, list):
                msg = "Data block carries no route manifest"
                raise ClientError(msg)
            self._manifest = [ClientRouteEntry.from_dict(entry) for entry in manifest]
            self._initial = data

            component = await self.load_component(data["page"])
            root = RenderRoot(self._renderer, MOUNT_ID)
            root.render(component, data.get("props", {}).get("pageProps") or {})
            self._root = root
        finally:
            self._mounting = False

        if self._router is not None:
            self._router.on(RouterEvent.ROUTE_CHANGE_COMPLETE, self._on_route_change)
        return root

    async def load_component(self, page: str) -> Any:
        """Resolve *page* to its route and load that route's component.

        Raises:
            ClientError: If no route or loader matches.

        """
        entry = resolve_client_route(page, self._manifest)
        key = PAGE_ROOT_TOKEN + entry.component_path
        loader = self._loaders.get(key)
        if loader is None:
            msg = f"No loader for {key!r} (route {entry.path})"
            raise ClientError(msg)
        module = await loader()
        return module.component

    async def render_page(self, url: str, data: PageData | None) -> None:
        """Render a navigated-to page into the existing root."""
        if self._root is None:
            msg = "Cannot render before hydrate()"
            raise ClientError(msg)
        if data is None:
            # Back/forward navigation carries no payload
            if self._router is None:
                return
            data = await self._router.fetch_page_data(url)
        component = await self.load_component(data.get("page") or url)
        self._root.render(component, data.get("pageProps") or {})

    async def settle(self) -> None:
        """Wait for scheduled navigation renders to finish."""
        while self._renders:
            await asyncio.gather(*list(self._renders), return_exceptions=True)

    def _on_route_change(self, url: str, data: PageData | None = None) -> None:
        task = asyncio.get_running_loop().create_task(self._render_safely(url, data))
        self._renders.add(task)
        task.add_done_callback(self._renders.discard)

    async def _render_safely(self, url: str, data: PageData | None) -> None:
        try:
            await self.render_page(url, data)
        except Exception as exc:
            print(f"  prowl: failed to render {url}: {exc}", file=sys.stderr)
