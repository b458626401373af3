"""Route compiler — turn a ``pages/`` tree into a route manifest.

File-path convention::

    pages/index.py                 -> /
    pages/about.py                 -> /about
    pages/blog/index.py            -> /blog
    pages/blog/[id].py             -> /blog/:id
    pages/blog/[category]/[id].py  -> /blog/:category/:id
    pages/_helpers.py              -> (skipped, reserved prefix)
    pages/notes.txt                -> (skipped, unsupported extension)

Bracket groups may carry a rest marker of one to three dots
(``[...slug]``); the dots are dropped from the parameter name and the
placeholder still spans a single segment.
"""

import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from prowl._errors import BuildError
from prowl.routes.manifest import RouteEntry, RouteManifest
from prowl.routes.paths import count_groups, path_to_regex

# Page modules are Python files
PAGE_SUFFIXES: frozenset[str] = frozenset({".py"})

# Files and directories starting with this are never routes
RESERVED_PREFIX = "_"

# File stem that maps to its containing directory
INDEX_STEM = "index"

_BRACKET_RE = re.compile(r"\[\.{0,3}(.+?)\]")


@dataclass(frozen=True, slots=True)
class PageDescriptor:
    """One discovered page file.

    Attributes:
        file_path: Absolute path to the page module.
        route_path: Compiled route path (e.g., ``/blog/:id``).
        file_name: Raw file name including the extension.
        is_dynamic: Whether any path segment is a bracket group.
        param_names: Parameter names in left-to-right order.

    """

    file_path: Path
    route_path: str
    file_name: str
    is_dynamic: bool
    param_names: tuple[str, ...]


def _convert_segment(segment: str) -> str:
    """``[id]`` -> ``:id``; ``[...slug]`` -> ``:slug``; others unchanged."""
    return _BRACKET_RE.sub(lambda m: ":" + m.group(1), segment)


def derive_route_path(relative: PurePosixPath) -> str:
    """Derive the route path for a page file relative to the pages root.

    ``index`` maps to its directory; every segment (directories included)
    has its bracket groups converted to placeholders.
    """
    directories = [_convert_segment(part) for part in relative.parent.parts]
    stem = relative.stem
    segments = directories if stem == INDEX_STEM else [*directories, _convert_segment(stem)]
    return "/" + "/".join(segments)


def extract_param_names(relative_path: str) -> tuple[str, ...]:
    """Bracket-group names of *relative_path*, outer directory first."""
    return tuple(m.group(1) for m in _BRACKET_RE.finditer(relative_path))


def _is_candidate(path: Path) -> bool:
    if path.name.startswith(RESERVED_PREFIX) or path.name.startswith("."):
        return False
    if path.is_dir():
        return path.name != "__pycache__"
    return path.suffix in PAGE_SUFFIXES


def scan_pages(pages_dir: Path) -> list[PageDescriptor]:
    """Walk *pages_dir* and describe every page file.

    Returns descriptors in walk order (sorted names, files before
    subdirectories).  Use :func:`compile_routes` for matching order.

    Raises:
        BuildError: If the directory is missing or cannot be traversed.

    """
    root = Path(pages_dir).resolve()
    if not root.is_dir():
        msg = f"Pages directory not found: {root}"
        raise BuildError(msg)

    pages: list[PageDescriptor] = []
    try:
        _walk(root, root, pages)
    except OSError as exc:
        msg = f"Failed to scan pages directory {root}: {exc}"
        raise BuildError(msg) from exc
    return pages


def _walk(directory: Path, root: Path, pages: list[PageDescriptor]) -> None:
    entries = sorted(directory.iterdir())

    for item in entries:
        if not item.is_file() or not _is_candidate(item):
            continue
        relative = PurePosixPath(item.relative_to(root).as_posix())
        is_dynamic = _BRACKET_RE.search(str(relative)) is not None
        pages.append(PageDescriptor(
            file_path=item,
            route_path=derive_route_path(relative),
            file_name=item.name,
            is_dynamic=is_dynamic,
            param_names=extract_param_names(str(relative)) if is_dynamic else (),
        ))

    for item in entries:
        if item.is_dir() and _is_candidate(item):
            _walk(item, root, pages)


def specificity_key(route_path: str) -> tuple[tuple[bool, ...], str]:
    """Sort key placing static segments ahead of placeholders, left to right.

    ``/blog/featured`` sorts before ``/blog/:id`` so the static route wins
    when both could match.
    """
    segments = [s for s in route_path.split("/") if s]
    return tuple(s.startswith(":") for s in segments), route_path


def compile_routes(pages: list[PageDescriptor]) -> RouteManifest:
    """Build a fresh manifest (all ``render_type`` unset) from descriptors.

    The same page tree always compiles to the same route list; only the
    build timestamp differs between runs.

    Raises:
        BuildError: If two page files compile to the same route path, or a
            file name yields a path whose placeholders do not line up with
            its bracket groups (e.g. ``[a]-[b].py`` or ``a:b.py``).

    """
    seen: dict[str, Path] = {}
    for page in pages:
        groups = count_groups(path_to_regex(page.route_path))
        if groups != len(page.param_names):
            msg = (
                f"Page {page.file_path} compiles to {page.route_path!r} with "
                f"{groups} placeholder(s) but {len(page.param_names)} bracket group(s); "
                "use one bracket group per segment and no ':' in file names"
            )
            raise BuildError(msg)
        if page.route_path in seen:
            msg = (
                f"Duplicate route path {page.route_path!r}: "
                f"defined in {seen[page.route_path]} and {page.file_path}"
            )
            raise BuildError(msg)
        seen[page.route_path] = page.file_path

    ordered = sorted(pages, key=lambda p: specificity_key(p.route_path))
    routes = [
        RouteEntry(
            path=page.route_path,
            component_path=str(page.file_path),
            pattern=path_to_regex(page.route_path),
            param_names=list(page.param_names),
            is_dynamic=page.is_dynamic,
        )
        for page in ordered
    ]
    return RouteManifest(routes=routes)
