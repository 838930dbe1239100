"""Export and display helpers for command hierarchies."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from rich.tree import Tree

from cmdgraph.entities.core import Arg
from cmdgraph.graph import NodeHandle
from cmdgraph.utils.helpers import ensure_directory, serialize_json
from cmdgraph.utils.logging import get_logger

from .builder import CommandHierarchy

_LOGGER = get_logger(module=__name__)


def _describe_arg(arg: Arg) -> str:
    if arg.flag is not None:
        spelled = ", ".join(arg.flag.spellings())
        suffix = " <value>" if arg.flag.takes_arg else ""
        return f"{spelled}{suffix}"
    if arg.subcommand is not None and arg.subcommand.aliases:
        return f"{arg.subcommand.name} ({', '.join(arg.subcommand.aliases)})"
    return arg.label


def hierarchy_to_dict(hierarchy: CommandHierarchy) -> Dict[str, Any]:
    """Serialisable snapshot: nodes with payloads, edges, and roots."""

    graph = hierarchy.graph
    nodes = []
    for handle, arg in graph.nodes():
        entry: Dict[str, Any] = {"handle": handle, "kind": arg.kind.value, "label": arg.label}
        if arg.flag is not None:
            entry["flag"] = arg.flag.model_dump()
        if arg.subcommand is not None:
            entry["aliases"] = list(arg.subcommand.aliases)
        nodes.append(entry)
    return {
        "program": hierarchy.definition.program,
        "nodes": nodes,
        "edges": [{"source": edge.source, "target": edge.target} for edge in graph.edges()],
        "roots": graph.roots().to_list(),
    }


def export_graph_structure(
    hierarchy: CommandHierarchy,
    output_path: str | Path,
    *,
    format: str = "json",
) -> Path:
    path = Path(output_path)
    ensure_directory(path.parent)
    format = format.lower()
    if format == "json":
        serialize_json(hierarchy_to_dict(hierarchy), path)
    elif format == "adjacency":
        serialize_json({str(k): v for k, v in hierarchy.graph.adjacency().items()}, path)
    elif format == "dot":
        graph = hierarchy.graph
        lines = [f'digraph "{hierarchy.definition.program}" {{']
        for handle, arg in graph.nodes():
            label = _describe_arg(arg).replace('"', '\\"')
            shape = "box" if arg.is_subcommand() else "ellipse"
            lines.append(f'  n{handle} [label="{label}", shape={shape}];')
        for edge in graph.edges():
            lines.append(f"  n{edge.source} -> n{edge.target};")
        lines.append("}")
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    else:
        raise ValueError(f"unsupported graph export format: {format}")
    _LOGGER.info("Exported command hierarchy", path=str(path), format=format)
    return path.resolve()


def render_tree(hierarchy: CommandHierarchy) -> Tree:
    """Build a rich tree: flags first, then subcommands, in declaration order."""

    tree = Tree(f"[bold]{hierarchy.definition.program}[/bold]")

    def _attach(branch: Tree, position: NodeHandle | None) -> None:
        for handle in hierarchy.flags(position):
            branch.add(f"[green]{_describe_arg(hierarchy.arg(handle))}[/green]")
        for handle in hierarchy.subcommands(position):
            child = branch.add(f"[cyan]{_describe_arg(hierarchy.arg(handle))}[/cyan]")
            _attach(child, handle)

    _attach(tree, None)
    return tree


__all__ = ["hierarchy_to_dict", "export_graph_structure", "render_tree"]
