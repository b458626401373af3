"""Shared type definitions for prowl."""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Literal

# How a route is produced; ``None`` until the build resolves it
type RenderType = Literal["ssg", "ssr"]

# Route URL pattern with ``:name`` placeholders (e.g., "/blog/:id")
type RoutePath = str

# Concrete parameter values for one route match or one static path
type Params = dict[str, str]

# Props handed to a page component
type Props = dict[str, Any]

# Payload returned for data-only navigation: {"pageProps", "query", "page"}
type PageData = dict[str, Any]

# Client-side loader map: "pages/blog/[id].py" -> async loader
type LoaderMap = Mapping[str, Callable[[], Awaitable[Any]]]
