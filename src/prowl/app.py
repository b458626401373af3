"""Prowl application — build and serve entry points.

``build()`` compiles the pages directory, settles every route as SSG or
SSR, writes the prerendered artifacts and the manifest.  ``serve()`` loads
that manifest once and answers requests through a Chirp app on Pounce.
"""

import asyncio
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

from prowl._errors import BuildError
from prowl.config import ProwlConfig
from prowl.config_loader import load_config

if TYPE_CHECKING:
    from chirp import App

    from prowl.export.static import BuildResult
    from prowl.observability.collector import StackCollector
    from prowl.routes.manifest import RouteManifest
    from prowl.server.dispatcher import RouterState


def compile_project(config: ProwlConfig, collector: StackCollector | None = None) -> RouteManifest:
    """Scan ``pages/`` and compile a fresh manifest (render types unset).

    Raises:
        BuildError: If the pages directory is missing or two pages collide.

    """
    from prowl.routes.compiler import compile_routes, scan_pages

    t0 = time.perf_counter()
    pages = scan_pages(config.pages_path)
    manifest = compile_routes(pages)
    if collector is not None:
        collector.record_scan(
            str(config.pages_path),
            pages=len(pages),
            dynamic=sum(1 for p in pages if p.is_dynamic),
            duration_ms=(time.perf_counter() - t0) * 1000,
        )
    return manifest


def create_app(
    config: ProwlConfig,
    state: RouterState,
    *,
    collector: StackCollector | None = None,
    debug: bool = False,
) -> App:
    """Create a Chirp App that serves pages from a loaded router state.

    Registers the page dispatcher, the ``/__prowl/*`` debug endpoints, and
    static file middleware for ``public/`` plus the bundled theme assets.
    """
    from chirp import App, AppConfig

    from prowl.document import DocumentRenderer
    from prowl.export.artifacts import ArtifactStore
    from prowl.observability import StackCollector
    from prowl.server.dispatcher import Dispatcher
    from prowl.server.router import PageRouter

    if collector is None:
        collector = StackCollector()

    app = App(config=AppConfig(
        template_dir=config.templates_path,
        static_dir=None,
        debug=debug,
        host=config.host,
        port=config.port,
    ))

    dispatcher = Dispatcher(
        state,
        DocumentRenderer.from_config(config),
        ArtifactStore(config.artifacts_path),
        collector=collector,
    )
    router = PageRouter(dispatcher, app)
    router.register_stats_endpoint(collector)
    router.register_routes_endpoint()
    router.register_pages()

    _mount_static_files(app, config)
    return app


def _mount_static_files(app: App, config: ProwlConfig) -> None:
    """Serve ``public/`` at ``/``, falling back to the bundled theme assets.

    Paths with no file behind them fall through to the page dispatcher.
    """
    from chirp.middleware import StaticFiles

    from prowl.theme import get_asset_dirs

    for asset_dir in get_asset_dirs(config):
        if asset_dir.is_dir():
            app.add_middleware(StaticFiles(directory=asset_dir, prefix="/", cache_control="no-cache"))


def build(root: str | Path = ".", **kwargs: object) -> BuildResult:
    """Compile routes, prerender SSG pages, and persist the manifest.

    A page that fails to prerender is reported and served with SSR; only a
    missing pages directory or an unwritable manifest stops the build.

    Args:
        root: Path to the project root directory.
        **kwargs: Override ProwlConfig fields.

    Raises:
        BuildError: On a build-fatal failure.

    """
    from prowl.banner import print_build_summary
    from prowl.export.static import StaticExporter
    from prowl.observability import StackCollector
    from prowl.routes.manifest import save_manifest

    config = load_config(Path(root), **kwargs)
    collector = StackCollector()

    manifest = compile_project(config, collector)
    exporter = StaticExporter(config, manifest, collector=collector)
    result = asyncio.run(exporter.export())

    try:
        save_manifest(manifest, config.manifest_path)
    except OSError as exc:
        msg = f"Failed to write route manifest {config.manifest_path}: {exc}"
        raise BuildError(msg) from exc

    print_build_summary(config, result)
    return result


def list_routes(root: str | Path = ".", **kwargs: object) -> list[str]:
    """Compile the route table and print it to stdout, one route per line.

    Render types come from the last build's manifest when there is one.
    """
    from prowl._errors import ManifestError
    from prowl.routes.manifest import client_component_path, read_manifest

    config = load_config(Path(root), **kwargs)
    manifest = compile_project(config)

    built: dict[str, str] = {}
    if config.manifest_path.is_file():
        try:
            built = {r.path: r.render_type or "-" for r in read_manifest(config.manifest_path).routes}
        except ManifestError as exc:
            print(f"  prowl: ignoring unreadable manifest: {exc}", file=sys.stderr)

    lines: list[str] = []
    for route in manifest.routes:
        render_type = built.get(route.path, "-")
        params = ", ".join(route.param_names)
        source = client_component_path(route.component_path, config.root, config.pages_dir)
        lines.append(f"{render_type:<4} {route.path:<32} {source}" + (f"  [{params}]" if params else ""))

    print("\n".join(lines))
    return lines


def serve(root: str | Path = ".", **kwargs: object) -> None:
    """Serve a built project on Pounce.

    The manifest is read once at startup; a missing or malformed manifest
    stops the process before it binds.  Multiple Pounce workers share the
    frozen Chirp app and the immutable router state.

    Args:
        root: Path to the project root directory.
        **kwargs: Override ProwlConfig fields.

    """
    from prowl.banner import print_banner
    from prowl.observability import EventLog, StackCollector
    from prowl.server.dispatcher import RouterState

    config = load_config(Path(root), **kwargs)
    t0 = time.perf_counter()

    state = RouterState.load(config.manifest_path, root=config.root, pages_dir=config.pages_dir)

    event_log = EventLog()
    collector = StackCollector(event_log)
    app = create_app(config, state, collector=collector)

    load_ms = (time.perf_counter() - t0) * 1000
    routes = state.routes
    print_banner(
        config, len(routes), mode="serve",
        ssg_count=sum(1 for r in routes if r.render_type == "ssg"),
        ssr_count=sum(1 for r in routes if r.render_type == "ssr"),
        load_ms=load_ms,
    )

    # Run via Pounce directly with multi-worker support
    from pounce.config import ServerConfig
    from pounce.server import Server

    server_config = ServerConfig(
        host=config.host,
        port=config.port,
        workers=config.workers,  # 0 = auto-detect via Pounce
    )
    server = Server(server_config, app, lifecycle_collector=collector)
    server.run()
