"""Perch CLI — route listing, controller checks, and a dev server.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch — explicit and conditional request routing for content sites.",
    )
    subparsers = parser.add_subparsers(dest="command")

    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    check_parser = subparsers.add_parser("check", help="Verify every controller id resolves")
    check_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    run_parser = subparsers.add_parser("run", help="Start the server")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from perch.cli._routes import run_routes

        run_routes(args)
    elif args.command == "check":
        from perch.cli._check import run_check

        run_check(args)
    elif args.command == "run":
        from perch.cli._run import run_server

        run_server(args)
