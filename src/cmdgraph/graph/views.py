"""Lazy, restartable traversal views over a :class:`~cmdgraph.graph.graph.Graph`.

Each view captures only the graph and its starting point. Iterating a view
recomputes the answer from the current arenas, so the same view can be
iterated any number of times and never mutates the graph.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, List

from .records import NodeHandle

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .graph import Graph


class _View:
    __slots__ = ("_graph",)

    def __init__(self, graph: "Graph[Any]") -> None:
        self._graph = graph

    def __iter__(self) -> Iterator[NodeHandle]:  # pragma: no cover - abstract
        raise NotImplementedError

    def count(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return next(iter(self), None) is not None

    def to_list(self) -> List[NodeHandle]:
        return list(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_list()!r})"


class Successors(_View):
    """Direct children of one node, in adjacency-chain order.

    Edges are prepended to the chain on insertion, so the most recently added
    child comes first.
    """

    __slots__ = ("_origin",)

    def __init__(self, graph: "Graph[Any]", origin: NodeHandle) -> None:
        super().__init__(graph)
        self._origin = origin

    @property
    def origin(self) -> NodeHandle:
        return self._origin

    def __iter__(self) -> Iterator[NodeHandle]:
        edges = self._graph._edges
        cursor = self._graph._nodes[self._origin].first_edge
        while cursor is not None:
            edge = edges[cursor]
            yield edge.target
            cursor = edge.next_edge


class Roots(_View):
    """Every node without an incoming edge, in ascending handle order."""

    __slots__ = ()

    def __iter__(self) -> Iterator[NodeHandle]:
        in_degree = self._graph._in_degree
        for index in range(len(self._graph._nodes)):
            if in_degree[index] == 0:
                yield NodeHandle(index)


class Ancestors(_View):
    """Nodes with a directed path into ``origin``, excluding ``origin``.

    Discovery is depth-first over incoming edges taken in edge-insertion
    order; each node is reported the first time it is reached. The visited
    set is seeded with ``origin`` so cycles terminate wherever they close.
    """

    __slots__ = ("_origin",)

    def __init__(self, graph: "Graph[Any]", origin: NodeHandle) -> None:
        super().__init__(graph)
        self._origin = origin

    @property
    def origin(self) -> NodeHandle:
        return self._origin

    def _incoming(self, target: NodeHandle) -> Iterator[NodeHandle]:
        for edge in self._graph._edges:
            if edge.target == target:
                yield edge.source

    def __iter__(self) -> Iterator[NodeHandle]:
        visited = {self._origin}
        # explicit frame stack keeps recursive discovery order without recursion
        stack = [self._incoming(self._origin)]
        while stack:
            for source in stack[-1]:
                if source in visited:
                    continue
                visited.add(source)
                yield source
                stack.append(self._incoming(source))
                break
            else:
                stack.pop()


__all__ = ["Successors", "Roots", "Ancestors"]
