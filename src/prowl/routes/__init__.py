"""Route compilation and the shared route manifest.

Scans a ``pages/`` directory, compiles each page file into a route path,
match pattern, and parameter list, and models the manifest that the build,
the server, and the client all read.

Public API::

    from prowl.routes import compile_routes, scan_pages

    manifest = compile_routes(scan_pages(Path("my-site/pages")))
"""

from prowl.routes.compiler import PageDescriptor, compile_routes, scan_pages
from prowl.routes.manifest import (
    ClientRouteEntry,
    MatchResult,
    RouteEntry,
    RouteManifest,
    project_client_manifest,
    read_manifest,
    save_manifest,
)
from prowl.routes.paths import artifact_path, path_to_regex, wildcard_pattern

__all__ = [
    "ClientRouteEntry",
    "MatchResult",
    "PageDescriptor",
    "RouteEntry",
    "RouteManifest",
    "artifact_path",
    "compile_routes",
    "path_to_regex",
    "project_client_manifest",
    "read_manifest",
    "save_manifest",
    "scan_pages",
    "wildcard_pattern",
]
