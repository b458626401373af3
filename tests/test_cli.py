"""Tests for prowl._cli — argument parsing and command dispatch."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from prowl._cli import _build_parser, main


class TestBuildParser:
    """_build_parser — CLI argument parsing."""

    def test_build_default_args(self) -> None:
        args = _build_parser().parse_args(["build"])
        assert args.command == "build"
        assert args.root == "."
        assert args.output is None

    def test_build_with_output(self) -> None:
        args = _build_parser().parse_args(["build", "my-site/", "--output", "dist"])
        assert args.root == "my-site/"
        assert args.output == "dist"

    def test_serve_defaults_leave_config_alone(self) -> None:
        args = _build_parser().parse_args(["serve"])
        assert args.command == "serve"
        assert args.host is None
        assert args.port is None
        assert args.workers is None

    def test_serve_all_flags(self) -> None:
        args = _build_parser().parse_args([
            "serve", "my-site/",
            "--host", "0.0.0.0",
            "--port", "8080",
            "--workers", "4",
            "--output", "dist",
        ])
        assert args.root == "my-site/"
        assert args.host == "0.0.0.0"
        assert args.port == 8080
        assert args.workers == 4
        assert args.output == "dist"

    def test_routes(self) -> None:
        args = _build_parser().parse_args(["routes", "my-site/"])
        assert args.command == "routes"
        assert args.root == "my-site/"

    def test_no_command_returns_none(self) -> None:
        assert _build_parser().parse_args([]).command is None


class TestMain:
    """main — dispatch and error reporting."""

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "prowl" in capsys.readouterr().out

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            main(["--version"])
        assert "0.1.0" in capsys.readouterr().out

    def test_build_dispatch(self) -> None:
        with patch("prowl.app.build") as build:
            main(["build", "site/", "--output", "dist"])
        build.assert_called_once_with(root="site/", output="dist")

    def test_serve_dispatch(self) -> None:
        with patch("prowl.app.serve") as serve:
            main(["serve", "--port", "9000"])
        serve.assert_called_once_with(root=".", host=None, port=9000, workers=None, output=None)

    def test_build_project(self, project: Path) -> None:
        main(["build", str(project)])
        assert (project / ".prowl" / "manifest.json").is_file()

    def test_routes_prints_table(self, project: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", str(project)])
        out = capsys.readouterr().out
        assert "/blog/:category/:id" in out
        assert "[category, id]" in out

    def test_prowl_error_exits_1(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["build", str(tmp_path)])
        assert exc_info.value.code == 1
        assert "Pages directory not found" in capsys.readouterr().err
