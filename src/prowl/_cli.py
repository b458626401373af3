"""Prowl CLI — prowl build / prowl serve / prowl routes.

Entry point for the ``prowl`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the prowl CLI."""
    parser = argparse.ArgumentParser(
        prog="prowl",
        description="File-system page router with build-time SSG/SSR resolution.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # prowl build
    build_parser = subparsers.add_parser(
        "build",
        help="Resolve render modes and prerender SSG pages",
    )
    build_parser.add_argument("root", nargs="?", default=".", help="Project root directory")
    build_parser.add_argument("--output", default=None, help="Output directory (default .prowl)")

    # prowl serve
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve a built project",
    )
    serve_parser.add_argument("root", nargs="?", default=".", help="Project root directory")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")
    serve_parser.add_argument("--workers", type=int, default=None, help="Worker count (0=auto)")
    serve_parser.add_argument("--output", default=None, help="Build output directory to serve")

    # prowl routes
    routes_parser = subparsers.add_parser(
        "routes",
        help="Print the compiled route table",
    )
    routes_parser.add_argument("root", nargs="?", default=".", help="Project root directory")

    return parser


def _get_version() -> str:
    """Get the package version."""
    from prowl import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from prowl._errors import ProwlError
    from prowl.app import build, list_routes, serve

    try:
        if args.command == "build":
            build(root=args.root, output=args.output)
        elif args.command == "serve":
            serve(
                root=args.root,
                host=args.host,
                port=args.port,
                workers=args.workers,
                output=args.output,
            )
        elif args.command == "routes":
            list_routes(root=args.root)
    except ProwlError as exc:
        print(f"  prowl: error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
