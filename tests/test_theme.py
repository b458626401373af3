"""Tests for prowl.theme — bundled shell and fallback chain."""

from __future__ import annotations

from pathlib import Path

from prowl.config import ProwlConfig
from prowl.theme import _bundled_theme_path, get_asset_dirs, get_template_dirs


# ---------------------------------------------------------------------------
# Bundled theme structure
# ---------------------------------------------------------------------------


class TestBundledTheme:
    """Verify the bundled default theme has all required files."""

    def test_required_templates_present(self) -> None:
        templates = _bundled_theme_path() / "templates"
        for name in ("document.html", "404.html", "500.html"):
            assert (templates / name).is_file(), f"Missing template: {name}"

    def test_stylesheet_present(self) -> None:
        assert (_bundled_theme_path() / "assets" / "styles.css").is_file()

    def test_document_has_mount_and_data_block(self) -> None:
        content = (_bundled_theme_path() / "templates" / "document.html").read_text(encoding="utf-8")
        assert '<div id="{{ mount_id }}">{{ body }}</div>' in content
        assert '<script id="{{ data_id }}" type="application/json">' in content


# ---------------------------------------------------------------------------
# Fallback chain
# ---------------------------------------------------------------------------


class TestFallbackChain:
    """User directories first, bundled theme last."""

    def test_template_dirs(self, tmp_path: Path) -> None:
        dirs = get_template_dirs(ProwlConfig(root=tmp_path))
        assert dirs == [tmp_path.resolve() / "templates", _bundled_theme_path() / "templates"]

    def test_missing_user_dir_still_listed(self, tmp_path: Path) -> None:
        dirs = get_template_dirs(ProwlConfig(root=tmp_path, templates_dir="nope"))
        assert dirs[0] == tmp_path.resolve() / "nope"

    def test_asset_dirs(self, tmp_path: Path) -> None:
        dirs = get_asset_dirs(ProwlConfig(root=tmp_path, public_dir="static"))
        assert dirs == [tmp_path.resolve() / "static", _bundled_theme_path() / "assets"]
