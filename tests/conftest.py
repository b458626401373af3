"""Shared test fixtures for prowl."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from prowl.config import ProwlConfig


def write_page(root: Path, relative: str, source: str) -> Path:
    """Write a page module under ``root/pages``, dedenting *source*."""
    path = root / "pages" / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(source))
    return path


def write_template(root: Path, name: str, source: str) -> Path:
    path = root / "templates" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source)
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small project covering every render-mode disposition.

    Routes::

        /                      ssg-pure        index.py
        /about                 ssg-with-data   about.py
        /blog/:id              ssg-dynamic     blog/[id].py (ids 1, 2)
        /blog/:category/:id    ssr (no paths)  blog/[category]/[id].py
        /dashboard             ssr (server)    dashboard.py

    Plus files the scanner must skip: ``_helpers.py``, ``notes.txt``, and
    a ``__pycache__`` directory.
    """
    write_page(tmp_path, "index.py", """
        template = "index.html"
    """)
    write_page(tmp_path, "about.py", """
        template = "about.html"

        def get_static_props(context):
            return {"props": {"title": "About us", "team": "Ada and Lin"}}
    """)
    write_page(tmp_path, "blog/[id].py", """
        template = "post.html"

        def get_static_paths():
            return {"paths": [{"params": {"id": "1"}}, {"params": {"id": "2"}}], "fallback": False}

        async def get_static_props(context):
            return {"props": {"heading": "Post " + context.params["id"]}}
    """)
    write_page(tmp_path, "blog/[category]/[id].py", """
        template = "category.html"
    """)
    write_page(tmp_path, "dashboard.py", """
        template = "dashboard.html"

        CALLS = []

        def get_server_props(context):
            CALLS.append(context.params)
            return {"props": {"user": context.query.get("user", "guest"), "visits": len(CALLS)}}
    """)
    write_page(tmp_path, "_helpers.py", """
        raise RuntimeError("never imported")
    """)
    (tmp_path / "pages" / "notes.txt").write_text("not a page\n")
    pycache = tmp_path / "pages" / "__pycache__"
    pycache.mkdir()
    (pycache / "helpers.cpython-314.pyc").write_bytes(b"")

    write_template(tmp_path, "index.html", "<h1>Home</h1>{{ link('/about', 'About') }}")
    write_template(tmp_path, "about.html", "<h1>{{ title }}</h1><p>{{ team }}</p>")
    write_template(tmp_path, "post.html", "<h1>{{ heading }}</h1>")
    write_template(tmp_path, "category.html", "<p>category post</p>")
    write_template(tmp_path, "dashboard.html", "<p>Hello {{ user }} #{{ visits }}</p>")

    public = tmp_path / "public"
    public.mkdir()
    (public / "robots.txt").write_text("User-agent: *\n")

    return tmp_path


@pytest.fixture
def config(project: Path) -> ProwlConfig:
    return ProwlConfig(root=project)


@pytest.fixture
def built(project: Path) -> Path:
    """The project after a full ``prowl build``."""
    from prowl.app import build

    build(project)
    return project
