"""Handle types and the node/edge records stored in the arenas."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NewType, TypeVar

T = TypeVar("T")

NodeHandle = NewType("NodeHandle", int)
EdgeHandle = NewType("EdgeHandle", int)


@dataclass(slots=True)
class Node(Generic[T]):
    """Payload plus the head of the node's outgoing edge chain."""

    payload: T
    first_edge: EdgeHandle | None = None


@dataclass(slots=True, frozen=True)
class Edge:
    """Directed link; ``next_edge`` points at the next edge sharing ``source``."""

    source: NodeHandle
    target: NodeHandle
    next_edge: EdgeHandle | None = None


__all__ = ["NodeHandle", "EdgeHandle", "Node", "Edge"]
