"""Bundled theme — the document shell, error pages, and base stylesheet.

A project's own directories always come first: kida finds a user
``document.html``/``404.html``/``500.html`` before the bundled ones, and
``public/`` files shadow the bundled ``styles.css``.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prowl.config import ProwlConfig


def _bundled_theme_path() -> Path:
    """Return the absolute path to the bundled default theme."""
    return Path(__file__).parent / "default"


def _chain(user_dir: Path, bundled: Path) -> list[Path]:
    # A missing user directory stays in the chain; lookups just fall through
    return [bundled] if user_dir == bundled else [user_dir, bundled]


def get_template_dirs(config: ProwlConfig) -> list[Path]:
    """Kida search path: ``[templates_path, bundled templates]``."""
    return _chain(config.templates_path, _bundled_theme_path() / "templates")


def get_asset_dirs(config: ProwlConfig) -> list[Path]:
    """Directories served at ``/``: ``[public_path, bundled assets]``."""
    return _chain(config.public_path, _bundled_theme_path() / "assets")
