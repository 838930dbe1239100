"""Exceptions raised by the graph engine."""

from __future__ import annotations

from typing import Literal

EdgeRule = Literal["too-few-nodes", "self-loop", "out-of-range", "duplicate"]


class GraphError(ValueError):
    """Base class for graph invariant violations."""


class InvalidHandle(GraphError, IndexError):
    """A handle does not address an element of its arena."""

    def __init__(self, handle: int, size: int, *, kind: str = "node") -> None:
        self.handle = handle
        self.size = size
        self.kind = kind
        super().__init__(f"invalid {kind} handle {handle}: arena holds {size} {kind}s")


class InvalidEdge(GraphError):
    """An edge insertion would break one of the graph invariants."""

    _MESSAGES = {
        "too-few-nodes": "an edge needs at least two nodes in the graph",
        "self-loop": "an edge cannot connect a node to itself",
        "out-of-range": "both endpoints must reference existing nodes",
        "duplicate": "the edge already exists",
    }

    def __init__(self, source: int, target: int, rule: EdgeRule) -> None:
        self.source = source
        self.target = target
        self.rule = rule
        super().__init__(f"invalid edge {source}->{target}: {self._MESSAGES[rule]}")


__all__ = ["GraphError", "InvalidHandle", "InvalidEdge", "EdgeRule"]
