"""The ``match`` command: resolve words against a command definition."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from cmdgraph.graph import GraphError
from cmdgraph.hierarchy import MatchError, SubcommandMatcher

from .common import CLIError, console, get_state, load_hierarchy


def match_command(
    ctx: typer.Context,
    definition: Path = typer.Argument(..., help="Definition file (YAML or JSON)."),
    words: Optional[List[str]] = typer.Argument(
        None,
        help="Words to match; put them after '--' to pass flags through verbatim.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the match result as JSON."),
) -> None:
    """Match command-line WORDS against the hierarchy declared in DEFINITION."""

    state = get_state(ctx)
    hierarchy = load_hierarchy(state, definition)
    matcher = SubcommandMatcher(hierarchy, state.settings.policies.matching)
    try:
        result = matcher.match(words or [])
    except (MatchError, GraphError) as exc:
        raise CLIError(str(exc)) from exc

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    command = " ".join([hierarchy.definition.program, *result.command_path])
    table = Table(title=command, box=None)
    table.add_column("Word")
    table.add_column("Kind")
    table.add_column("Resolved")
    for entry in result.entries:
        resolved = "" if entry.handle is None else hierarchy.arg(entry.handle).label
        if entry.value is not None:
            resolved = f"{resolved}={entry.value}"
        table.add_row(entry.word, entry.kind.value, resolved)
    console.print(table)
    if result.unknown_flags:
        console.print(f"[yellow]Unknown flags:[/yellow] {' '.join(result.unknown_flags)}")
