"""Integration tests — a built project served through Chirp's test client."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from prowl.app import create_app
from prowl.config import ProwlConfig
from prowl.document import read_data_block
from prowl.observability import EventLog, StackCollector
from prowl.server.dispatcher import CACHE_CONTROL_SSG, CACHE_CONTROL_SSR, RouterState


def _app(built: Path, collector: StackCollector | None = None):
    config = ProwlConfig(root=built)
    state = RouterState.load(config.manifest_path, root=config.root, pages_dir=config.pages_dir)
    return create_app(config, state, collector=collector)


def _body(response) -> str:
    return response.body.decode() if isinstance(response.body, bytes) else response.body


def _header(response, name: str) -> str | None:
    for key, value in response.headers:
        key = key.decode() if isinstance(key, bytes) else key
        if key.lower() == name.lower():
            return value.decode() if isinstance(value, bytes) else value
    return None


class TestPageRequests:
    """Pages dispatched through the Chirp app."""

    @pytest.mark.asyncio
    async def test_ssg_page(self, built: Path) -> None:
        from chirp.testing.client import TestClient

        async with TestClient(_app(built)) as client:
            response = await client.get("/about")
            assert response.status == 200
            assert "<h1>About us</h1>" in _body(response)
            assert _header(response, "Cache-Control") == CACHE_CONTROL_SSG

    @pytest.mark.asyncio
    async def test_root(self, built: Path) -> None:
        from chirp.testing.client import TestClient

        async with TestClient(_app(built)) as client:
            response = await client.get("/")
            assert response.status == 200
            assert "<h1>Home</h1>" in _body(response)

    @pytest.mark.asyncio
    async def test_ssr_page_receives_query(self, built: Path) -> None:
        from chirp.testing.client import TestClient

        async with TestClient(_app(built)) as client:
            response = await client.get("/dashboard?user=ada")
            assert response.status == 200
            body = _body(response)
            assert "Hello ada" in body
            assert read_data_block(body)["gssp"] is True
            assert _header(response, "Cache-Control") == CACHE_CONTROL_SSR

    @pytest.mark.asyncio
    async def test_data_only(self, built: Path) -> None:
        from chirp.testing.client import TestClient

        async with TestClient(_app(built)) as client:
            response = await client.get("/blog/1?_prowl_data=1")
            assert response.status == 200
            assert json.loads(_body(response)) == {
                "pageProps": {"heading": "Post 1"},
                "query": {"id": "1"},
                "page": "/blog/:id",
            }

    @pytest.mark.asyncio
    async def test_ssr_data_only_drops_marker(self, built: Path) -> None:
        from chirp.testing.client import TestClient

        async with TestClient(_app(built)) as client:
            response = await client.get("/dashboard?_prowl_data=1")
            payload = json.loads(_body(response))
            assert payload["pageProps"]["user"] == "guest"
            assert payload["page"] == "/dashboard"

    @pytest.mark.asyncio
    async def test_unknown_path_is_404(self, built: Path) -> None:
        from chirp.testing.client import TestClient

        async with TestClient(_app(built)) as client:
            response = await client.get("/no/such/page/here")
            assert response.status == 404

    @pytest.mark.asyncio
    async def test_unknown_path_data_only(self, built: Path) -> None:
        from chirp.testing.client import TestClient

        async with TestClient(_app(built)) as client:
            response = await client.get("/no/such/page/here?_prowl_data=1")
            assert response.status == 404
            assert json.loads(_body(response)) == {"error": "Page not found"}


class TestPublicFiles:
    @pytest.mark.asyncio
    async def test_public_file(self, built: Path) -> None:
        from chirp.testing.client import TestClient

        async with TestClient(_app(built)) as client:
            response = await client.get("/robots.txt")
            assert response.status == 200
            assert "User-agent" in _body(response)

    @pytest.mark.asyncio
    async def test_bundled_stylesheet(self, built: Path) -> None:
        from chirp.testing.client import TestClient

        async with TestClient(_app(built)) as client:
            response = await client.get("/styles.css")
            assert response.status == 200


class TestDebugEndpoints:
    @pytest.mark.asyncio
    async def test_routes_endpoint(self, built: Path) -> None:
        from chirp.testing.client import TestClient

        async with TestClient(_app(built)) as client:
            response = await client.get("/__prowl/routes")
            assert response.status == 200
            routes = {r["path"]: r for r in json.loads(_body(response))}
            assert routes["/blog/:id"]["renderType"] == "ssg"
            assert routes["/blog/:id"]["componentPath"] == "/blog/[id].py"
            assert routes["/dashboard"]["renderType"] == "ssr"

    @pytest.mark.asyncio
    async def test_stats_endpoint(self, built: Path) -> None:
        from chirp.testing.client import TestClient

        collector = StackCollector(EventLog())
        async with TestClient(_app(built, collector)) as client:
            await client.get("/about")
            response = await client.get("/__prowl/stats")
            assert response.status == 200
            stats = json.loads(_body(response))
            assert stats["event_log"]["by_type"]["RequestDispatched"] == 1
            assert stats["dispatches"][0]["path"] == "/about"
