"""Tests for prowl.client.link — anchors that navigate without reloading."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from prowl.client.link import LINK_ATTR, PREFETCH_ATTR, ClickEvent, Link, link
from prowl.client.router import ClientRouter
from prowl.client.window import HeadlessWindow


class RecordingFetcher:
    def __init__(self) -> None:
        self.calls: list[str] = []

    async def fetch(self, url: str) -> dict[str, Any]:
        self.calls.append(url)
        return {"pageProps": {}, "query": {}, "page": url}


def _router() -> tuple[ClientRouter, RecordingFetcher]:
    fetcher = RecordingFetcher()
    return ClientRouter(HeadlessWindow("/"), fetcher), fetcher


class TestRender:
    """Link.render / link() — anchor markup."""

    def test_plain_anchor(self) -> None:
        assert str(link("/about", "About")) == f'<a href="/about" {LINK_ATTR}>About</a>'

    def test_escapes_href_and_text(self) -> None:
        html = str(link('/q?a=1&b="x"', "<b>bold</b>"))
        assert 'href="/q?a=1&amp;b=&quot;x&quot;"' in html
        assert "&lt;b&gt;bold&lt;/b&gt;" in html

    def test_prefetch_disabled_marker(self) -> None:
        assert f'{PREFETCH_ATTR}="false"' in str(link("/about", "About", prefetch=False))

    def test_extra_attributes(self) -> None:
        html = str(link("/about", "About", class_="nav", aria_label="About page", hidden=True, title=None))
        assert ' class="nav"' in html
        assert ' aria-label="About page"' in html
        assert " hidden" in html
        assert "title" not in html

    def test_html_protocol(self) -> None:
        assert Link("/a", "A").__html__() == str(Link("/a", "A").render())


class TestClick:
    """on_click — plain clicks navigate, modified clicks don't."""

    @pytest.mark.asyncio
    async def test_plain_click_pushes(self) -> None:
        router, _ = _router()
        event = ClickEvent()
        await Link("/about", "About", router=router).on_click(event)
        assert event.default_prevented
        assert router.pathname == "/about"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("modifier", ["meta_key", "ctrl_key"])
    async def test_modified_click_ignored(self, modifier: str) -> None:
        router, fetcher = _router()
        event = ClickEvent(**{modifier: True})
        await Link("/about", "About", router=router).on_click(event)
        assert not event.default_prevented
        assert router.pathname == "/"
        assert fetcher.calls == []

    @pytest.mark.asyncio
    async def test_without_router(self) -> None:
        event = ClickEvent()
        await Link("/about", "About").on_click(event)
        assert not event.default_prevented


class TestPrefetch:
    """on_mouse_enter — warm the cache unless disabled."""

    @pytest.mark.asyncio
    async def test_hover_prefetches(self) -> None:
        router, fetcher = _router()
        Link("/about", "About", router=router).on_mouse_enter()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert fetcher.calls == ["/about"]

    @pytest.mark.asyncio
    async def test_hover_then_click_fetches_once(self) -> None:
        router, fetcher = _router()
        anchor = Link("/about", "About", router=router)
        anchor.on_mouse_enter()
        await anchor.on_click(ClickEvent())
        assert fetcher.calls == ["/about"]

    @pytest.mark.asyncio
    async def test_prefetch_disabled(self) -> None:
        router, fetcher = _router()
        Link("/about", "About", router=router, prefetch=False).on_mouse_enter()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert fetcher.calls == []
