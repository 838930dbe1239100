"""Top-level package for cmdgraph, an arena graph behind command hierarchies."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cmdgraph")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.1.0"

from .config.settings import Settings, get_settings
from .definition import CommandDefinition, SubCommandConfig, load_definition
from .entities import Arg, ArgKind, Flag, SubCommand
from .graph import Graph, GraphError, InvalidEdge, InvalidHandle, NodeHandle
from .hierarchy import CommandHierarchy, HierarchyBuilder, SubcommandMatcher, build_hierarchy

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "Graph",
    "NodeHandle",
    "GraphError",
    "InvalidEdge",
    "InvalidHandle",
    "Arg",
    "ArgKind",
    "Flag",
    "SubCommand",
    "CommandDefinition",
    "SubCommandConfig",
    "load_definition",
    "CommandHierarchy",
    "HierarchyBuilder",
    "SubcommandMatcher",
    "build_hierarchy",
]
