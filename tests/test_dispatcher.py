"""Tests for prowl.server.dispatcher — RouterState and the two-state dispatcher."""

from __future__ import annotations

from pathlib import Path

import pytest

from prowl._errors import ManifestError
from prowl.config import ProwlConfig
from prowl.document import DocumentRenderer, read_data_block
from prowl.export.artifacts import ArtifactStore
from prowl.observability import EventLog, RequestDispatched, StackCollector
from prowl.routes.manifest import RouteEntry, RouteManifest
from prowl.server.dispatcher import (
    CACHE_CONTROL_SSG,
    CACHE_CONTROL_SSR,
    DATA_MARKER,
    Dispatcher,
    RouterState,
    is_data_request,
)

from .conftest import write_page


def _state(built: Path) -> RouterState:
    config = ProwlConfig(root=built)
    return RouterState.load(config.manifest_path, root=config.root, pages_dir=config.pages_dir)


def _dispatcher(built: Path, collector: StackCollector | None = None) -> Dispatcher:
    config = ProwlConfig(root=built)
    return Dispatcher(
        _state(built),
        DocumentRenderer.from_config(config),
        ArtifactStore(config.artifacts_path),
        collector=collector,
    )


def _headers(result) -> dict[str, str]:
    return dict(result.headers)


# ---------------------------------------------------------------------------
# RouterState
# ---------------------------------------------------------------------------


class TestRouterState:
    """RouterState — loaded once, matched many times."""

    def test_match_static(self, built: Path) -> None:
        match = _state(built).match_route("/about")
        assert match is not None
        assert match.route.path == "/about"
        assert match.params == {}

    def test_match_nested_dynamic(self, built: Path) -> None:
        match = _state(built).match_route("/blog/tech/1")
        assert match is not None
        assert match.route.path == "/blog/:category/:id"
        assert match.params == {"category": "tech", "id": "1"}

    def test_query_ignored(self, built: Path) -> None:
        match = _state(built).match_route("/blog/3?ref=home")
        assert match is not None
        assert match.params == {"id": "3"}

    def test_no_match(self, built: Path) -> None:
        assert _state(built).match_route("/nope/a/b/c") is None

    def test_unresolved_route_refused(self, tmp_path: Path) -> None:
        manifest = RouteManifest(routes=[
            RouteEntry("/about", "/x/about.py", "^/about$", [], False),
        ])
        with pytest.raises(ManifestError, match="no renderType"):
            RouterState(manifest, root=tmp_path)

    def test_missing_manifest(self, project: Path) -> None:
        with pytest.raises(ManifestError, match="prowl build"):
            _state(project)

    def test_client_manifest_order(self, built: Path) -> None:
        state = _state(built)
        client = state.get_client_manifest()
        assert [c.path for c in client] == [r.path for r in state.routes]
        blog = next(c for c in client if c.path == "/blog/:id")
        assert blog.component_path == "/blog/[id].py"

    def test_independent_states(self, built: Path, tmp_path: Path) -> None:
        other = RouterState(
            RouteManifest(routes=[RouteEntry("/x", "/x.py", "^/x$", [], False, "ssr")]),
            root=tmp_path,
        )
        assert _state(built).match_route("/x") is None
        assert other.match_route("/x") is not None

    def test_data_marker(self) -> None:
        assert is_data_request({DATA_MARKER: "1"})
        assert not is_data_request({DATA_MARKER: "0"})
        assert not is_data_request({})


# ---------------------------------------------------------------------------
# SSG
# ---------------------------------------------------------------------------


class TestStaticDispatch:
    """ssg routes are answered from artifacts only."""

    @pytest.mark.asyncio
    async def test_document(self, built: Path) -> None:
        result = await _dispatcher(built).dispatch("/about")
        assert result.status == 200
        assert not result.is_json
        assert "<h1>About us</h1>" in result.body
        assert _headers(result)["Cache-Control"] == CACHE_CONTROL_SSG

    @pytest.mark.asyncio
    async def test_document_is_the_artifact(self, built: Path) -> None:
        config = ProwlConfig(root=built)
        result = await _dispatcher(built).dispatch("/blog/1")
        assert result.body == (config.artifacts_path / "blog" / "1.html").read_text()

    @pytest.mark.asyncio
    async def test_root_serves_index_artifact(self, built: Path) -> None:
        result = await _dispatcher(built).dispatch("/")
        assert result.status == 200
        assert "<h1>Home</h1>" in result.body

    @pytest.mark.asyncio
    async def test_data_only(self, built: Path) -> None:
        result = await _dispatcher(built).dispatch("/blog/2", data_only=True)
        assert result.status == 200
        assert result.is_json
        assert result.json() == {
            "pageProps": {"heading": "Post 2"},
            "query": {"id": "2"},
            "page": "/blog/:id",
        }
        assert _headers(result)["Cache-Control"] == CACHE_CONTROL_SSG

    @pytest.mark.asyncio
    async def test_missing_artifact_is_500(self, built: Path) -> None:
        # /blog/3 matches an ssg route but was never prerendered
        result = await _dispatcher(built).dispatch("/blog/3")
        assert result.status == 500
        assert "500" in result.body

    @pytest.mark.asyncio
    async def test_missing_artifact_data_only(self, built: Path) -> None:
        result = await _dispatcher(built).dispatch("/blog/3", data_only=True)
        assert result.status == 500
        assert result.json() == {"error": "Internal server error"}

    @pytest.mark.asyncio
    async def test_ssg_never_calls_page_code(self, built: Path) -> None:
        dispatcher = _dispatcher(built)
        await dispatcher.dispatch("/about")
        assert "/about" in dispatcher.state.pages
        # The registry loaded nothing for the ssg route
        assert dispatcher.state.pages._modules == {}


# ---------------------------------------------------------------------------
# SSR
# ---------------------------------------------------------------------------


class TestServerDispatch:
    """ssr routes are rendered fresh on every request."""

    @pytest.mark.asyncio
    async def test_document(self, built: Path) -> None:
        result = await _dispatcher(built).dispatch("/dashboard", query={"user": "ada"})
        assert result.status == 200
        assert "Hello ada" in result.body
        assert _headers(result)["Cache-Control"] == CACHE_CONTROL_SSR

        data = read_data_block(result.body)
        assert data["gssp"] is True
        assert data["buildId"] == "server"
        assert data["page"] == "/dashboard"
        assert data["props"]["pageProps"]["user"] == "ada"

    @pytest.mark.asyncio
    async def test_runs_every_request(self, built: Path) -> None:
        dispatcher = _dispatcher(built)
        first = await dispatcher.dispatch("/dashboard", data_only=True)
        second = await dispatcher.dispatch("/dashboard", data_only=True)
        assert second.json()["pageProps"]["visits"] == first.json()["pageProps"]["visits"] + 1

    @pytest.mark.asyncio
    async def test_data_only(self, built: Path) -> None:
        result = await _dispatcher(built).dispatch(
            "/dashboard", data_only=True, query={"user": "lin", DATA_MARKER: "1"},
        )
        assert result.json()["pageProps"]["user"] == "lin"
        assert result.json()["page"] == "/dashboard"
        assert _headers(result)["Cache-Control"] == CACHE_CONTROL_SSR

    @pytest.mark.asyncio
    async def test_dynamic_without_paths(self, built: Path) -> None:
        result = await _dispatcher(built).dispatch("/blog/tech/9", data_only=True)
        assert result.json() == {
            "pageProps": {},
            "query": {"category": "tech", "id": "9"},
            "page": "/blog/:category/:id",
        }

    @pytest.mark.asyncio
    async def test_render_error_is_500(self, built: Path) -> None:
        write_page(built, "dashboard.py", """
            template = "dashboard.html"

            def get_server_props(context):
                raise RuntimeError("session store down")
        """)
        result = await _dispatcher(built).dispatch("/dashboard")
        assert result.status == 500
        assert "session store down" in result.body
        assert "Cache-Control" not in _headers(result)


# ---------------------------------------------------------------------------
# 404 and observability
# ---------------------------------------------------------------------------


class TestNotFound:
    @pytest.mark.asyncio
    async def test_document(self, built: Path) -> None:
        result = await _dispatcher(built).dispatch("/nope/a/b/c")
        assert result.status == 404
        assert "/nope/a/b/c" in result.body

    @pytest.mark.asyncio
    async def test_data_only(self, built: Path) -> None:
        result = await _dispatcher(built).dispatch("/nope/a/b/c", data_only=True)
        assert result.status == 404
        assert result.json() == {"error": "Page not found"}


class TestDispatchEvents:
    @pytest.mark.asyncio
    async def test_recorded(self, built: Path) -> None:
        log = EventLog()
        dispatcher = _dispatcher(built, StackCollector(log))
        await dispatcher.dispatch("/about?x=1")
        await dispatcher.dispatch("/nope/a/b/c", data_only=True)

        missing, about = log.query(event_type=RequestDispatched)
        assert about.path == "/about"
        assert about.route == "/about"
        assert about.render_type == "ssg"
        assert about.status == 200
        assert missing.route is None
        assert missing.data_only is True
        assert missing.status == 404
