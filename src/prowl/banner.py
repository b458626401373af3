"""Startup banner and build summary — mode-aware status output.

Detects ``NO_COLOR`` / ``TERM`` for safe fallback.  Everything goes to
stderr so stdout stays clean for ``prowl routes``.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prowl.config import ProwlConfig
    from prowl.export.static import BuildResult


# ---------------------------------------------------------------------------
# ANSI helpers, respecting NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_RED = "\033[31m" if _COLOR else ""


# ---------------------------------------------------------------------------
# Mode badges
# ---------------------------------------------------------------------------

_MODE_STYLES: dict[str, tuple[str, str]] = {
    "build": (_YELLOW, "build"),
    "serve": (_CYAN, "serve"),
}


def _mode_badge(mode: str) -> str:
    """Return a styled [mode] badge."""
    color, label = _MODE_STYLES.get(mode, (_DIM, mode))
    return f"{color}[{label}]{_RESET}"


def _clickable_url(url: str) -> str:
    """Wrap *url* in an OSC 8 hyperlink escape if the terminal supports it."""
    if not _COLOR:
        return url
    return f"\033]8;;{url}\033\\{_BOLD}{_CYAN}{url}{_RESET}\033]8;;\033\\"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _header(mode: str) -> list[str]:
    from prowl import __version__

    return [
        "",
        f"  {_BOLD}prowl{_RESET} {_DIM}v{__version__}{_RESET}  {_mode_badge(mode)}",
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(
    config: ProwlConfig,
    route_count: int,
    mode: str,
    *,
    ssg_count: int = 0,
    ssr_count: int = 0,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the prowl startup banner to stderr.

    Args:
        config: Resolved ProwlConfig.
        route_count: Number of routes in the manifest.
        mode: ``"build"`` or ``"serve"``.
        ssg_count: Routes answered from prerendered artifacts.
        ssr_count: Routes rendered per request.
        load_ms: Time spent loading the manifest in milliseconds.
        warnings: Optional list of warning messages to display.

    """
    lines = _header(mode)

    timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
    lines.append(f"  {_DIM}├─{_RESET} {_plural(route_count, 'route')} loaded{timing}")
    lines.append(
        f"  {_DIM}├─{_RESET} {_GREEN}{ssg_count} ssg{_RESET} {_DIM}·{_RESET} {ssr_count} ssr"
    )
    lines.append(f"  {_DIM}├─{_RESET} templates: {_DIM}{config.templates_path}{_RESET}")

    if mode == "build":
        lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_path}{_RESET}")
    elif mode == "serve":
        workers_label = str(config.workers) if config.workers > 0 else "auto"
        lines.append(f"  {_DIM}└─{_RESET} workers: {workers_label}")
        url = f"http://{config.host}:{config.port}"
        lines.append("")
        lines.append(f"  {_clickable_url(url)}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")
    print("\n".join(lines), file=sys.stderr)


def print_build_summary(config: ProwlConfig, result: BuildResult) -> None:
    """Print per-kind route counts after ``prowl build``."""
    lines = _header("build")

    rows = [
        ("ssg (pure)", result.count("ssg-pure")),
        ("ssg (with data)", result.count("ssg-with-data")),
        ("ssg (dynamic)", result.count("ssg-dynamic")),
        ("ssr", result.count("declined")),
    ]
    for label, count in rows:
        lines.append(f"  {_DIM}├─{_RESET} {label}: {count}")

    failed = result.count("failed")
    if failed:
        lines.append(f"  {_DIM}├─{_RESET} {_RED}failed (served as ssr): {failed}{_RESET}")

    lines.append(
        f"  {_DIM}├─{_RESET} {_plural(result.total_pages, 'page')} prerendered "
        f"{_DIM}in {result.duration_ms:.0f}ms{_RESET}"
    )
    lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_path}{_RESET}")

    if result.warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in result.warnings)

    lines.append("")
    print("\n".join(lines), file=sys.stderr)
