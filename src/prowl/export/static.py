"""Static export — settle each route's render mode and prerender the SSG ones.

Every route leaves the build with exactly one render type.  The decision
order per route is:

1. the page exports ``get_server_props``            -> ssr (declined)
2. dynamic route without ``get_static_paths``       -> ssr (declined)
3. dynamic route with ``get_static_paths``          -> ssg, one pair per path
4. static route with ``get_static_props``           -> ssg, one pair
5. static route with neither                        -> ssg, one pair from ``{}``

A route whose prerendering fails for any reason is logged, falls back to
ssr, and the build goes on.  Routes are processed one at a time in manifest
order, so two builds of the same tree produce the same artifacts.
"""

from __future__ import annotations

import shutil
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from prowl._errors import BuildError, PageError
from prowl.document import STATIC_BUILD_ID, DocumentRenderer
from prowl.export.artifacts import ArtifactStore, ExportedFile
from prowl.routes.loader import SERVER_PROPS, STATIC_PATHS, STATIC_PROPS, load_page_module
from prowl.routes.manifest import project_client_manifest
from prowl.routes.paths import artifact_path

if TYPE_CHECKING:
    from prowl._types import Params, RenderType
    from prowl.config import ProwlConfig
    from prowl.observability.collector import StackCollector
    from prowl.routes.loader import PageModule
    from prowl.routes.manifest import ClientRouteEntry, RouteEntry, RouteManifest

type DispositionKind = Literal["ssg-pure", "ssg-with-data", "ssg-dynamic", "declined", "failed"]

# Reasons recorded for declined routes
HAS_SERVER_PROPS = "has-server-props"
DYNAMIC_NO_PATHS = "dynamic-no-paths"


@dataclass(frozen=True, slots=True)
class Disposition:
    """Outcome of resolving one route.

    Attributes:
        route_path: The route (``/blog/:id``).
        render_type: The mode the route is frozen to.
        kind: How the route was settled.
        reason: Why it was declined, or the error message if it failed.
        count: Number of artifact pairs written.
        files: The artifact files written for this route.
        warnings: Non-fatal build warnings about the page module.

    """

    route_path: str
    render_type: RenderType
    kind: DispositionKind
    reason: str = ""
    count: int = 0
    files: tuple[ExportedFile, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Aggregate result of a full build.

    Attributes:
        dispositions: One per route, in manifest order.
        duration_ms: Total wall-clock time for the export.
        output_dir: Absolute path to the artifacts directory.

    """

    dispositions: tuple[Disposition, ...]
    duration_ms: float
    output_dir: Path
    files: tuple[ExportedFile, ...] = field(init=False)

    def __post_init__(self) -> None:
        files = tuple(f for d in self.dispositions for f in d.files)
        object.__setattr__(self, "files", files)

    def count(self, kind: DispositionKind) -> int:
        """Number of routes settled as *kind*."""
        return sum(1 for d in self.dispositions if d.kind == kind)

    @property
    def total_ssg(self) -> int:
        return sum(1 for d in self.dispositions if d.render_type == "ssg")

    @property
    def total_ssr(self) -> int:
        return sum(1 for d in self.dispositions if d.render_type == "ssr")

    @property
    def total_pages(self) -> int:
        """Number of prerendered documents."""
        return sum(d.count for d in self.dispositions)

    @property
    def warnings(self) -> tuple[str, ...]:
        return tuple(w for d in self.dispositions for w in d.warnings)


class StaticExporter:
    """Resolves every route of a manifest and writes SSG artifacts.

    Mutates the manifest in place: each route gets its ``render_type`` and,
    for prerendered dynamic routes, its ``static_paths``.

    Args:
        config: Frozen prowl configuration.
        manifest: Freshly compiled manifest (no render types yet).
        documents: Document renderer; built from *config* when omitted.
        collector: Optional event collector.

    """

    def __init__(
        self,
        config: ProwlConfig,
        manifest: RouteManifest,
        *,
        documents: DocumentRenderer | None = None,
        collector: StackCollector | None = None,
    ) -> None:
        self._config = config
        self._manifest = manifest
        self._documents = documents if documents is not None else DocumentRenderer.from_config(config)
        self._store = ArtifactStore(config.artifacts_path)
        self._collector = collector
        self._client_manifest: list[ClientRouteEntry] = project_client_manifest(
            manifest.routes, config.root, config.pages_dir,
        )

    @property
    def store(self) -> ArtifactStore:
        return self._store

    async def export(self) -> BuildResult:
        """Clean the artifacts directory and resolve every route in order."""
        start = time.perf_counter()
        self._clean_output(self._store.root)

        dispositions = [await self.resolve_route(route) for route in self._manifest.routes]

        elapsed = (time.perf_counter() - start) * 1000
        return BuildResult(
            dispositions=tuple(dispositions),
            duration_ms=elapsed,
            output_dir=self._store.root,
        )

    async def resolve_route(self, route: RouteEntry) -> Disposition:
        """Settle *route*'s render mode, writing artifacts for SSG.

        Never raises for page-level failures; those become a ``failed``
        disposition and the route is served with SSR instead.
        """
        warnings: list[str] = []
        try:
            disposition = await self._resolve(route, warnings)
        except Exception as exc:
            print(f"  prowl: prerender failed for {route.path}: {exc}", file=sys.stderr)
            disposition = Disposition(
                route_path=route.path,
                render_type="ssr",
                kind="failed",
                reason=str(exc),
                warnings=tuple(warnings),
            )

        for warning in disposition.warnings:
            print(f"  prowl: warning: {warning}", file=sys.stderr)

        route.assign_render_type(disposition.render_type)
        if self._collector is not None:
            self._collector.record_resolution(
                route.path,
                disposition.render_type,
                disposition.kind,
                reason=disposition.reason,
                count=disposition.count,
            )
        return disposition

    async def _resolve(self, route: RouteEntry, warnings: list[str]) -> Disposition:
        module = load_page_module(route.component_path)

        if module.has_server_props:
            if module.has_static_paths:
                warnings.append(
                    f"{route.path} exports both {SERVER_PROPS} and {STATIC_PATHS}; "
                    f"it will be rendered on every request"
                )
            return self._declined(route, HAS_SERVER_PROPS, warnings)

        if route.is_dynamic:
            if not module.has_static_paths:
                return self._declined(route, DYNAMIC_NO_PATHS, warnings)

            tuples = await module.static_paths()
            if not module.has_static_props:
                warnings.append(
                    f"{route.path} exports {STATIC_PATHS} without {STATIC_PROPS}; "
                    f"its pages render with empty props"
                )
            files: list[ExportedFile] = []
            for params in tuples:
                self._check_params(route, params)
                files.extend(await self._render(route, module, params))
            route.static_paths = tuples
            return Disposition(
                route_path=route.path,
                render_type="ssg",
                kind="ssg-dynamic",
                count=len(tuples),
                files=tuple(files),
                warnings=tuple(warnings),
            )

        files = list(await self._render(route, module, {}))
        return Disposition(
            route_path=route.path,
            render_type="ssg",
            kind="ssg-with-data" if module.has_static_props else "ssg-pure",
            count=1,
            files=tuple(files),
            warnings=tuple(warnings),
        )

    @staticmethod
    def _declined(route: RouteEntry, reason: str, warnings: list[str]) -> Disposition:
        return Disposition(
            route_path=route.path,
            render_type="ssr",
            kind="declined",
            reason=reason,
            warnings=tuple(warnings),
        )

    @staticmethod
    def _check_params(route: RouteEntry, params: Params) -> None:
        missing = [name for name in route.param_names if name not in params]
        if missing:
            msg = f"{STATIC_PATHS} for {route.path} returned params {params!r} missing {missing}"
            raise PageError(msg)

    async def _render(
        self,
        route: RouteEntry,
        module: PageModule,
        params: Params,
    ) -> tuple[ExportedFile, ExportedFile]:
        props = await module.static_props(params)
        html = self._documents.page(
            module.component,
            props,
            page=route.path,
            query=params,
            build_id=STATIC_BUILD_ID,
            manifest=self._client_manifest,
        )
        address = artifact_path(route.path, params)
        files = self._store.write_page(address, html, props, dict(params))
        if self._collector is not None:
            for f in files:
                self._collector.record_artifact(address, str(f.output_path), size_bytes=f.size_bytes)
        return files

    @staticmethod
    def _clean_output(output_dir: Path) -> None:
        """Remove and recreate the output directory.

        Raises:
            BuildError: If the directory cannot be cleared or created.

        """
        try:
            if output_dir.exists():
                shutil.rmtree(output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Failed to prepare output directory {output_dir}: {exc}"
            raise BuildError(msg) from exc
