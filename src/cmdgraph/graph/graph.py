"""Arena-backed directed graph used to hold command hierarchies."""

from __future__ import annotations

from typing import Dict, Generic, Iterator, List, Set, Tuple, TypeVar

from cmdgraph.config.policies import GraphPolicy
from cmdgraph.utils.logging import get_logger

from .arena import Arena
from .errors import GraphError, InvalidEdge
from .records import Edge, EdgeHandle, Node, NodeHandle
from .views import Ancestors, Roots, Successors

T = TypeVar("T")

_LOGGER = get_logger(module=__name__)


class Graph(Generic[T]):
    """Directed graph with append-only node and edge arenas.

    Every node keeps the handle of its newest outgoing edge and every edge
    keeps the handle of the next older edge leaving the same source, forming
    a per-node singly linked adjacency chain inside the edge arena.
    """

    def __init__(self, policy: GraphPolicy | None = None) -> None:
        self._policy = policy or GraphPolicy()
        self._nodes: Arena[Node[T]] = Arena(kind="node")
        self._edges: Arena[Edge] = Arena(kind="edge")
        # auxiliary indexes; answers match a scan of the edge arena
        self._pairs: Set[Tuple[int, int]] = set()
        self._in_degree: List[int] = []

    @classmethod
    def create(cls, policy: GraphPolicy | None = None) -> "Graph[T]":
        """Return an empty graph."""

        return cls(policy)

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, handle: object) -> bool:
        return isinstance(handle, int) and self._nodes.contains(handle)

    def __getitem__(self, handle: NodeHandle) -> T:
        return self.payload(handle)

    @property
    def policy(self) -> GraphPolicy:
        return self._policy

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def payload(self, handle: NodeHandle) -> T:
        return self._nodes[handle].payload

    def node(self, handle: NodeHandle) -> Node[T]:
        return self._nodes[handle]

    def edge(self, handle: EdgeHandle) -> Edge:
        return self._edges[handle]

    def nodes(self) -> Iterator[Tuple[NodeHandle, T]]:
        for index, node in enumerate(self._nodes):
            yield NodeHandle(index), node.payload

    def edges(self) -> Iterator[Edge]:
        return iter(self._edges)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def insert_node(self, payload: T) -> NodeHandle:
        """Append a node without outgoing edges and return its handle."""

        if len(self._nodes) >= self._policy.max_nodes:
            raise GraphError(f"max_nodes={self._policy.max_nodes} exceeded")
        handle = NodeHandle(self._nodes.push(Node(payload)))
        self._in_degree.append(0)
        return handle

    def insert_node_under(self, parent: NodeHandle, payload: T) -> NodeHandle:
        """Append a node and connect ``parent`` to it in one step."""

        handle = self.insert_node(payload)
        self.insert_edge(parent, handle)
        return handle

    def insert_edge(self, source: NodeHandle, target: NodeHandle) -> EdgeHandle:
        """Prepend a ``source -> target`` edge to the source's chain."""

        self._validate_edge(source, target)
        node = self._nodes[source]
        handle = EdgeHandle(self._edges.push(Edge(source, target, node.first_edge)))
        node.first_edge = handle
        self._pairs.add((source, target))
        self._in_degree[target] += 1
        _LOGGER.debug("Inserted edge", source=source, target=target, edge=handle)
        return handle

    def _validate_edge(self, source: NodeHandle, target: NodeHandle) -> None:
        size = len(self._nodes)
        if size < 2:
            raise InvalidEdge(source, target, "too-few-nodes")
        if source == target:
            raise InvalidEdge(source, target, "self-loop")
        if not (self._nodes.contains(source) and self._nodes.contains(target)):
            raise InvalidEdge(source, target, "out-of-range")
        if (source, target) in self._pairs:
            raise InvalidEdge(source, target, "duplicate")

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------
    def roots(self) -> Roots:
        """Nodes that no edge targets, in ascending handle order."""

        return Roots(self)

    def successors(self, handle: NodeHandle | None) -> Successors | Roots:
        """Direct children of ``handle``; the roots when ``handle`` is ``None``."""

        if handle is None:
            return self.roots()
        return Successors(self, NodeHandle(self._nodes.check(handle)))

    def ancestors(self, handle: NodeHandle) -> Ancestors:
        """Every node with a directed path into ``handle``, first-seen order."""

        return Ancestors(self, NodeHandle(self._nodes.check(handle)))

    # ------------------------------------------------------------------
    # Analytics & export helpers
    # ------------------------------------------------------------------
    def out_degree(self, handle: NodeHandle) -> int:
        return self.successors(handle).count()

    def in_degree(self, handle: NodeHandle) -> int:
        return self._in_degree[self._nodes.check(handle)]

    def depth(self) -> int:
        """Number of breadth-first levels reachable from the roots."""

        frontier = self.roots().to_list()
        seen: Set[int] = set(frontier)
        levels = 0
        while frontier:
            levels += 1
            following: List[NodeHandle] = []
            for handle in frontier:
                for child in self.successors(handle):
                    if child not in seen:
                        seen.add(child)
                        following.append(child)
            frontier = following
        return levels

    def statistics(self) -> Dict[str, int]:
        """Return structural statistics for reporting."""

        out_degrees = [self.out_degree(handle) for handle, _ in self.nodes()]
        return {
            "node_count": self.node_count,
            "edge_count": self.edge_count,
            "root_count": self.roots().count(),
            "max_out_degree": max(out_degrees, default=0),
            "max_in_degree": max(self._in_degree, default=0),
            "depth": self.depth(),
        }

    def adjacency(self) -> Dict[int, List[int]]:
        """Return ``{source: [targets in successor order]}`` for export."""

        return {handle: self.successors(handle).to_list() for handle, _ in self.nodes()}


__all__ = ["Graph"]
