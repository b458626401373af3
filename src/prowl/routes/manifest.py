"""Route manifest — the one data structure build, server, and client share.

The JSON form is the wire contract between ``prowl build`` and the serving
process::

    {
      "routes": [
        {"path": "/blog/:id", "componentPath": "/abs/pages/blog/[id].py",
         "pattern": "^/blog/([^/]+)$", "paramNames": ["id"],
         "isDynamic": true, "renderType": "ssg",
         "staticPaths": [{"id": "1"}, {"id": "2"}]}
      ],
      "buildTime": "2026-01-01T00:00:00+00:00"
    }

Changing the RouteEntry field set breaks both the dispatcher and the client
projection.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath
from typing import Any

from prowl._errors import ManifestError
from prowl._types import Params, RenderType, RoutePath
from prowl.routes.paths import count_groups

_RENDER_TYPES: frozenset[str] = frozenset({"ssg", "ssr"})


@dataclass(slots=True)
class RouteEntry:
    """One routable path.

    ``render_type`` starts as ``None`` and is set exactly once by the build
    via :meth:`assign_render_type`.

    Attributes:
        path: Route path with ``:name`` placeholders.
        component_path: Absolute path to the page source file.
        pattern: Anchored match expression (see ``paths.path_to_regex``).
        param_names: Placeholder names in capture-group order.
        is_dynamic: Whether the route has placeholders.
        render_type: ``"ssg"``, ``"ssr"``, or ``None`` before resolution.
        static_paths: Parameter tuples pre-generated for a dynamic route.

    """

    path: RoutePath
    component_path: str
    pattern: str
    param_names: list[str]
    is_dynamic: bool
    render_type: RenderType | None = None
    static_paths: list[Params] | None = None

    def assign_render_type(self, render_type: RenderType) -> None:
        """Record the resolved render mode; refuses a second assignment."""
        if self.render_type is not None:
            msg = (
                f"Route {self.path!r} already resolved to {self.render_type!r}; "
                f"refusing to change it to {render_type!r}"
            )
            raise ManifestError(msg)
        if render_type not in _RENDER_TYPES:
            msg = f"Unknown render type {render_type!r} for route {self.path!r}"
            raise ManifestError(msg)
        self.render_type = render_type

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "path": self.path,
            "componentPath": self.component_path,
            "pattern": self.pattern,
            "paramNames": list(self.param_names),
            "isDynamic": self.is_dynamic,
            "renderType": self.render_type,
        }
        if self.static_paths is not None:
            data["staticPaths"] = [dict(p) for p in self.static_paths]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RouteEntry:
        """Parse and validate one manifest entry.

        Raises:
            ManifestError: On missing keys, wrong types, an uncompilable
                pattern, or a param/capture-group count mismatch.

        """
        try:
            entry = cls(
                path=str(data["path"]),
                component_path=str(data["componentPath"]),
                pattern=str(data["pattern"]),
                param_names=[str(n) for n in data["paramNames"]],
                is_dynamic=bool(data["isDynamic"]),
                render_type=data.get("renderType"),
                static_paths=data.get("staticPaths"),
            )
        except (KeyError, TypeError) as exc:
            msg = f"Malformed route entry {data!r}: {exc}"
            raise ManifestError(msg) from exc

        if entry.render_type is not None and entry.render_type not in _RENDER_TYPES:
            msg = f"Route {entry.path!r} has unknown renderType {entry.render_type!r}"
            raise ManifestError(msg)

        try:
            groups = count_groups(entry.pattern)
        except re.error as exc:
            msg = f"Route {entry.path!r} has an invalid pattern {entry.pattern!r}: {exc}"
            raise ManifestError(msg) from exc
        if groups != len(entry.param_names):
            msg = (
                f"Route {entry.path!r}: pattern has {groups} capture group(s) "
                f"but {len(entry.param_names)} param name(s)"
            )
            raise ManifestError(msg)

        return entry


@dataclass(slots=True)
class RouteManifest:
    """Ordered routes plus the build timestamp.  First matching route wins."""

    routes: list[RouteEntry] = field(default_factory=list)
    build_time: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_dict(self) -> dict[str, Any]:
        return {
            "routes": [r.to_dict() for r in self.routes],
            "buildTime": self.build_time,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: object) -> RouteManifest:
        if not isinstance(data, dict) or not isinstance(data.get("routes"), list):
            msg = "Manifest must be an object with a 'routes' list"
            raise ManifestError(msg)
        build_time = data.get("buildTime")
        if not isinstance(build_time, str):
            msg = "Manifest is missing its 'buildTime' string"
            raise ManifestError(msg)
        routes = [RouteEntry.from_dict(r) for r in data["routes"]]
        return cls(routes=routes, build_time=build_time)


@dataclass(frozen=True, slots=True)
class MatchResult:
    """A matched route and its resolved parameters.  Never persisted."""

    route: RouteEntry
    params: Params


@dataclass(frozen=True, slots=True)
class ClientRouteEntry:
    """The slice of a RouteEntry the client keeps for navigation.

    ``component_path`` is relative to the page root (``/blog/[id].py``) so
    that ``PAGE_ROOT_TOKEN + component_path`` is a loader-map key.
    """

    path: RoutePath
    component_path: str
    is_dynamic: bool
    param_names: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "componentPath": self.component_path,
            "isDynamic": self.is_dynamic,
            "paramNames": list(self.param_names),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientRouteEntry:
        return cls(
            path=data["path"],
            component_path=data["componentPath"],
            is_dynamic=bool(data["isDynamic"]),
            param_names=tuple(data["paramNames"]),
        )


def save_manifest(manifest: RouteManifest, path: Path) -> None:
    """Persist *manifest* as JSON.  ``OSError`` propagates to the caller."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(manifest.to_json(), encoding="utf-8")


def read_manifest(path: Path) -> RouteManifest:
    """Read and validate a persisted manifest.

    Raises:
        ManifestError: If the file is missing, unreadable, or malformed.

    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read route manifest {path}: {exc}. Run 'prowl build' first."
        raise ManifestError(msg) from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Route manifest {path} is not valid JSON: {exc}"
        raise ManifestError(msg) from exc
    return RouteManifest.from_dict(data)


def client_component_path(component_path: str, root: Path | str, pages_dir: str = "pages") -> str:
    """Rewrite an absolute page source path relative to the page root.

    ``/srv/site/pages/blog/[id].py`` with root ``/srv/site`` -> ``/blog/[id].py``
    """
    source = PurePosixPath(Path(component_path).as_posix())
    base = PurePosixPath(Path(root).as_posix())
    try:
        parts = source.relative_to(base).parts
    except ValueError:
        parts = source.parts[1:] if source.is_absolute() else source.parts
    if parts and parts[0] == pages_dir:
        parts = parts[1:]
    return "/" + "/".join(parts)


def project_client_manifest(
    routes: list[RouteEntry],
    root: Path | str,
    pages_dir: str = "pages",
) -> list[ClientRouteEntry]:
    """Project routes to the client form, preserving manifest order."""
    return [
        ClientRouteEntry(
            path=r.path,
            component_path=client_component_path(r.component_path, root, pages_dir),
            is_dynamic=r.is_dynamic,
            param_names=tuple(r.param_names),
        )
        for r in routes
    ]
