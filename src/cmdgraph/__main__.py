"""Entry point for ``python -m cmdgraph`` delegating to the Typer CLI."""

from __future__ import annotations

from typing import Iterable

import typer

from cmdgraph.cli.main import app


def main(argv: Iterable[str] | None = None) -> int:
    """Run the CLI without letting click call ``sys.exit`` itself."""

    args = list(argv) if argv is not None else None
    try:
        return app(prog_name="cmdgraph", args=args, standalone_mode=False) or 0
    except typer.Exit as exc:
        return exc.exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
