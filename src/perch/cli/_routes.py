"""``perch routes`` — list explicit and conditional routes.

Explicit routes print first (they always win), then conditional routes
in priority order.
"""

import argparse

from perch.cli._resolve import load_app


def _print_table(headers: tuple[str, str, str], rows: list[tuple[str, str, str]]) -> None:
    widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(headers[:2])]
    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{}}"
    print(fmt.format(*headers))
    sep_len = widths[0] + widths[1] + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))


def run_routes(args: argparse.Namespace) -> None:
    """Print the route tables for the app named by ``args.app``."""
    app = load_app(args.app)
    engine = app.engine

    explicit = [
        (", ".join(sorted(r.methods)), r.path, r.controller) for r in engine.explicit.routes
    ]
    conditional = [
        (str(i), r.key or "(always)", r.controller)
        for i, r in enumerate(engine.conditional, start=1)
    ]

    if not explicit and not conditional:
        print("No routes registered.")
        return

    if explicit:
        _print_table(("METHOD", "PATH", "CONTROLLER"), explicit)
    if conditional:
        if explicit:
            print()
        _print_table(("PRIORITY", "PREDICATES", "CONTROLLER"), conditional)
