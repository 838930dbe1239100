"""Commands that inspect a command definition without matching any words."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from cmdgraph.hierarchy import export_graph_structure, render_tree

from .common import CLIError, console, get_state, load_hierarchy, render_json

app = typer.Typer(
    add_completion=False,
    help="Render, summarise and export command hierarchies.",
    no_args_is_help=True,
)

_EXTENSIONS = {"json": "json", "adjacency": "json", "dot": "dot"}


def _tree_command(
    ctx: typer.Context,
    definition: Path = typer.Argument(..., help="Definition file (YAML or JSON)."),
) -> None:
    hierarchy = load_hierarchy(get_state(ctx), definition)
    console.print(render_tree(hierarchy))


def _stats_command(
    ctx: typer.Context,
    definition: Path = typer.Argument(..., help="Definition file (YAML or JSON)."),
) -> None:
    hierarchy = load_hierarchy(get_state(ctx), definition)
    table = Table(title=f"Hierarchy: {hierarchy.definition.program}", box=None)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for key, value in hierarchy.describe().items():
        table.add_row(key, str(value))
    console.print(table)


def _export_command(
    ctx: typer.Context,
    definition: Path = typer.Argument(..., help="Definition file (YAML or JSON)."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-O",
        help="Destination file; defaults to <paths.output_dir>/<program>.<ext>.",
        show_default=False,
    ),
    output_format: str = typer.Option(
        "json",
        "--format",
        "-f",
        help="Export format (json, adjacency or dot).",
        case_sensitive=False,
    ),
) -> None:
    state = get_state(ctx)
    fmt = output_format.lower()
    if fmt not in _EXTENSIONS:
        raise CLIError("--format must be one of: json, adjacency, dot")
    hierarchy = load_hierarchy(state, definition)
    target = output or Path(state.settings.paths.output_dir) / (
        f"{hierarchy.definition.program}.{_EXTENSIONS[fmt]}"
    )
    written = export_graph_structure(hierarchy, target, format=fmt)
    console.print(f"[green]Wrote {fmt} export to[/green] {written}")


def _ancestors_command(
    ctx: typer.Context,
    definition: Path = typer.Argument(..., help="Definition file (YAML or JSON)."),
    command_path: List[str] = typer.Argument(..., help="Subcommand names from the top level down."),
) -> None:
    hierarchy = load_hierarchy(get_state(ctx), definition)
    try:
        handle = hierarchy.resolve(command_path)
    except KeyError as exc:
        raise CLIError(exc.args[0]) from exc

    table = Table(title=" ".join(hierarchy.path(handle)), box=None)
    table.add_column("Handle", justify="right")
    table.add_column("Kind")
    table.add_column("Name")
    for ancestor in hierarchy.graph.ancestors(handle):
        arg = hierarchy.arg(ancestor)
        table.add_row(str(ancestor), arg.kind.value, arg.label)
    console.print(table)


def _config_command(ctx: typer.Context) -> None:
    state = get_state(ctx)
    render_json("Resolved Settings", state.settings.model_dump(mode="json"))


app.command("tree")(_tree_command)
app.command("stats")(_stats_command)
app.command("export")(_export_command)
app.command("ancestors")(_ancestors_command)
app.command("config")(_config_command)
