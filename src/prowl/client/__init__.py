"""Client navigation layer — router, page-data cache, links, and hydration.

Runs wherever there is a window: a browser bridge, or the in-memory
:class:`~prowl.client.window.HeadlessWindow`::

    window = HeadlessWindow("/")
    async with HttpxFetcher("http://127.0.0.1:3000") as fetcher:
        router = create_router(window, fetcher)
        await router.push("/blog/1")
"""

from prowl.client.app import PAGE_ROOT_TOKEN, ClientApp, RenderRoot, build_loader_map, resolve_client_route
from prowl.client.events import Channel, RouterEvent
from prowl.client.fetch import HttpxFetcher, data_url
from prowl.client.link import ClickEvent, Link, link
from prowl.client.router import CachedPageData, ClientRouter, PageDataFetcher, create_router
from prowl.client.window import HeadlessWindow

__all__ = [
    "PAGE_ROOT_TOKEN",
    "CachedPageData",
    "Channel",
    "ClickEvent",
    "ClientApp",
    "ClientRouter",
    "HeadlessWindow",
    "HttpxFetcher",
    "Link",
    "PageDataFetcher",
    "RenderRoot",
    "RouterEvent",
    "build_loader_map",
    "create_router",
    "data_url",
    "link",
    "resolve_client_route",
]
