"""``perch run`` — serve an app with pounce."""

import argparse

from perch.cli._resolve import load_app


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and start the server."""
    from perch.server.dev import run_dev_server

    app = load_app(args.app)
    app._ensure_frozen()
    run_dev_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        workers=app.config.workers,
        reload=app.config.debug,
        app_path=args.app,
    )
