"""Route path semantics shared by the build, the server, and the client.

Every component that turns a route path into something else goes through
this module, so ``/blog/:id`` means the same thing everywhere:

    path_to_regex("/blog/:category/:id")  -> "^/blog/([^/]+)/([^/]+)$"
    wildcard_pattern("/blog/:id")         -> "^/blog/[^/]+$"
    artifact_path("/blog/:id", {"id": "1"}) -> "/blog/1"
    artifact_path("/", {})                -> "/index"
"""

import re

from prowl._types import Params, RoutePath

# Metacharacters escaped before placeholder substitution.  Kept to this set
# (rather than ``re.escape``) so persisted patterns stay portable.
_REGEX_META = re.compile(r"[.*+?^${}()|\[\]\\]")

# A ``:name`` placeholder spans one path segment
_PLACEHOLDER = re.compile(r":([^/]+)")

# One path segment, without the slash
SEGMENT_CAPTURE = "([^/]+)"
SEGMENT_WILDCARD = "[^/]+"

# Artifact name used for the root route
INDEX_ARTIFACT = "/index"


def _escape(route_path: RoutePath) -> str:
    return _REGEX_META.sub(lambda m: "\\" + m.group(0), route_path)


def path_to_regex(route_path: RoutePath) -> str:
    """Synthesize the anchored match expression for a route path.

    Each placeholder becomes one capture group, in the order the
    placeholders appear, so group *n* belongs to ``param_names[n]``.
    """
    pattern = _PLACEHOLDER.sub(lambda _m: SEGMENT_CAPTURE, _escape(route_path))
    return f"^{pattern}$"


def wildcard_pattern(route_path: RoutePath) -> str:
    """Like :func:`path_to_regex` but with non-capturing segment wildcards.

    Used by the client to decide which dynamic route a URL belongs to.
    """
    pattern = _PLACEHOLDER.sub(lambda _m: SEGMENT_WILDCARD, _escape(route_path))
    return f"^{pattern}$"


def count_groups(pattern: str) -> int:
    """Number of capture groups in *pattern*."""
    return re.compile(pattern).groups


def placeholder_names(route_path: RoutePath) -> list[str]:
    """Placeholder names of *route_path* in left-to-right order."""
    return _PLACEHOLDER.findall(route_path)


def artifact_path(route_path: RoutePath, params: Params) -> str:
    """Resolve the artifact address for a route and concrete parameters.

    Every occurrence of each placeholder is substituted.  Longer names are
    substituted first so ``:id`` never eats the prefix of ``:idx``.
    """
    path = route_path
    for name in sorted(params, key=len, reverse=True):
        path = path.replace(f":{name}", str(params[name]))
    if path == "/":
        return INDEX_ARTIFACT
    return path


def strip_query(url: str) -> str:
    """Drop the query (and fragment) from *url*; empty becomes ``/``."""
    path = url.split("?", 1)[0].split("#", 1)[0]
    return path or "/"
