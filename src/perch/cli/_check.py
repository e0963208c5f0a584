"""``perch check`` — verify that every routed controller id resolves."""

import argparse
import sys

from perch.cli._resolve import load_app


def run_check(args: argparse.Namespace) -> None:
    """Resolve every controller id; exit non-zero if any fail."""
    app = load_app(args.app)
    failures = app.engine.unresolved()
    if not failures:
        print("All controllers resolve.")
        return
    for controller_id, exc in failures:
        print(f"{controller_id}: {exc}", file=sys.stderr)
    raise SystemExit(1)
