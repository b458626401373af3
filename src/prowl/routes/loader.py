"""Page loader — import page modules and expose their capability set.

A page module is a plain Python file under ``pages/``::

    # pages/blog/[id].py
    template = "blog/post.html"          # the renderable (required)

    def get_static_paths():              # optional, dynamic routes
        return {"paths": [{"params": {"id": "1"}}], "fallback": False}

    async def get_static_props(context): # optional, build time
        return {"props": {"post": await load_post(context.params["id"])}}

    def get_server_props(context):       # optional, every request
        return {"props": {"now": time.time()}}

Capabilities may be ``def`` or ``async def``.  The build and the server only
ever call them through :class:`PageModule`.
"""

import hashlib
import importlib.util
import inspect
import re
import sys
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from prowl._errors import PageError
from prowl._types import Params, Props
from prowl.routes.manifest import RouteEntry

# Module attribute holding the renderable component
COMPONENT_ATTR = "template"

STATIC_PROPS = "get_static_props"
STATIC_PATHS = "get_static_paths"
SERVER_PROPS = "get_server_props"

_UNSAFE_NAME = re.compile(r"\W")


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a page capability and await the result if it's awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


@dataclass(frozen=True, slots=True)
class StaticPropsContext:
    """Argument to ``get_static_props``; ``params`` is empty for static routes."""

    params: Params = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ServerPropsContext:
    """Argument to ``get_server_props``, built fresh for every request.

    Attributes:
        request: The chirp ``Request`` (``None`` outside a server).
        params: Route parameters from the matched path.
        query: Query-string parameters, data marker excluded.

    """

    request: Any
    params: Params
    query: dict[str, str]


@dataclass(frozen=True, slots=True)
class PageModule:
    """The capability set of one loaded page module.

    Attributes:
        source: Filesystem path of the page file.
        component: The renderable handed to the component renderer.
        get_static_props: Build-time props function, if exported.
        get_static_paths: Static-path enumerator, if exported.
        get_server_props: Per-request props function, if exported.

    """

    source: Path
    component: Any
    get_static_props: Any = None
    get_static_paths: Any = None
    get_server_props: Any = None

    @property
    def has_static_props(self) -> bool:
        return self.get_static_props is not None

    @property
    def has_static_paths(self) -> bool:
        return self.get_static_paths is not None

    @property
    def has_server_props(self) -> bool:
        return self.get_server_props is not None

    async def static_props(self, params: Params) -> Props:
        """Run ``get_static_props`` (empty props when absent)."""
        if self.get_static_props is None:
            return {}
        result = await self._call(STATIC_PROPS, self.get_static_props, StaticPropsContext(params))
        return _props_from(result, STATIC_PROPS, self.source)

    async def static_paths(self) -> list[Params]:
        """Run ``get_static_paths`` and return the parameter tuples."""
        if self.get_static_paths is None:
            msg = f"Page {self.source} does not export {STATIC_PATHS}"
            raise PageError(msg)
        result = await self._call(STATIC_PATHS, self.get_static_paths)
        paths = result.get("paths") if isinstance(result, Mapping) else None
        if not isinstance(paths, list):
            msg = f"{STATIC_PATHS} in {self.source} must return {{'paths': [...]}}, got {result!r}"
            raise PageError(msg)

        tuples: list[Params] = []
        for item in paths:
            params = item.get("params") if isinstance(item, Mapping) else None
            if not isinstance(params, Mapping):
                msg = f"{STATIC_PATHS} in {self.source}: each path needs a 'params' mapping, got {item!r}"
                raise PageError(msg)
            tuples.append({str(k): str(v) for k, v in params.items()})
        return tuples

    async def server_props(self, context: ServerPropsContext) -> Props:
        """Run ``get_server_props`` (empty props when absent)."""
        if self.get_server_props is None:
            return {}
        result = await self._call(SERVER_PROPS, self.get_server_props, context)
        return _props_from(result, SERVER_PROPS, self.source)

    async def _call(self, name: str, func: Any, *args: Any) -> Any:
        try:
            return await invoke(func, *args)
        except PageError:
            raise
        except Exception as exc:
            msg = f"{name} in {self.source} raised {type(exc).__name__}: {exc}"
            raise PageError(msg) from exc


def _props_from(result: Any, name: str, source: Path) -> Props:
    if not isinstance(result, Mapping):
        msg = f"{name} in {source} must return a mapping with 'props', got {result!r}"
        raise PageError(msg)
    props = result.get("props") or {}
    if not isinstance(props, Mapping):
        msg = f"{name} in {source}: 'props' must be a mapping, got {props!r}"
        raise PageError(msg)
    return dict(props)


def _module_name(page_file: Path) -> str:
    """Import-safe module name, the same in every process.

    ``pages/blog/[id].py`` -> ``prowl_pages.pages.blog._id__<sha1 prefix>``
    """
    parts = [_UNSAFE_NAME.sub("_", p) for p in page_file.with_suffix("").parts[-3:]]
    digest = hashlib.sha1(str(page_file).encode()).hexdigest()[:8]
    return "prowl_pages." + ".".join(parts) + f"_{digest}"


def load_page_module(page_file: Path | str) -> PageModule:
    """Import a page file without touching ``sys.path``.

    Raises:
        PageError: If the file cannot be imported or exports no component.

    """
    page_file = Path(page_file)
    module_name = _module_name(page_file)
    spec = importlib.util.spec_from_file_location(module_name, page_file)
    if spec is None or spec.loader is None:
        msg = f"Cannot load page module {page_file}"
        raise PageError(msg)

    try:
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)  # type: ignore[union-attr]
    except Exception as exc:
        sys.modules.pop(module_name, None)
        msg = f"Failed to load page module {page_file}: {exc}"
        raise PageError(msg) from exc

    component = getattr(module, COMPONENT_ATTR, None)
    if component is None:
        msg = f"Page module {page_file} must define '{COMPONENT_ATTR}'"
        raise PageError(msg)

    capabilities: dict[str, Any] = {}
    for name in (STATIC_PROPS, STATIC_PATHS, SERVER_PROPS):
        func = getattr(module, name, None)
        if func is not None and not callable(func):
            msg = f"'{name}' in {page_file} must be callable"
            raise PageError(msg)
        capabilities[name] = func

    return PageModule(source=page_file, component=component, **capabilities)


class PageRegistry:
    """Route -> page module, built once when the manifest is loaded.

    Each route gets a loader up front; the module itself is imported on first
    use and reused afterwards.  Safe to share across worker threads.

    Args:
        routes: Manifest routes, in any order.

    """

    __slots__ = ("_lock", "_modules", "_sources")

    def __init__(self, routes: list[RouteEntry]) -> None:
        self._sources: dict[str, Path] = {r.path: Path(r.component_path) for r in routes}
        self._modules: dict[str, PageModule] = {}
        self._lock = threading.Lock()

    def __contains__(self, route_path: object) -> bool:
        return route_path in self._sources

    def __len__(self) -> int:
        return len(self._sources)

    def get(self, route: RouteEntry) -> PageModule:
        """Return the page module for *route*, importing it at most once.

        Raises:
            PageError: If the route is unknown or its module fails to load.

        """
        module = self._modules.get(route.path)
        if module is not None:
            return module
        source = self._sources.get(route.path)
        if source is None:
            msg = f"No page registered for route {route.path!r}"
            raise PageError(msg)
        with self._lock:
            module = self._modules.get(route.path)
            if module is None:
                module = load_page_module(source)
                self._modules[route.path] = module
        return module
