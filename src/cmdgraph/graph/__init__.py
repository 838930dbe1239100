"""Arena-backed directed graph engine."""

from __future__ import annotations

from .arena import Arena
from .errors import GraphError, InvalidEdge, InvalidHandle
from .graph import Graph
from .records import Edge, EdgeHandle, Node, NodeHandle
from .views import Ancestors, Roots, Successors

__all__ = [
    "Arena",
    "Graph",
    "Node",
    "Edge",
    "NodeHandle",
    "EdgeHandle",
    "Successors",
    "Roots",
    "Ancestors",
    "GraphError",
    "InvalidEdge",
    "InvalidHandle",
]
