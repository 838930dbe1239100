"""Materialise command definitions into an arena graph."""

from __future__ import annotations

import re
from typing import Dict, List, Sequence

from cmdgraph.config.policies import GraphPolicy, HierarchyPolicy, Policies
from cmdgraph.definition.models import CommandDefinition, SubCommandConfig
from cmdgraph.entities.core import Arg
from cmdgraph.graph import Graph, GraphError, NodeHandle
from cmdgraph.utils.logging import get_logger

_LOGGER = get_logger(module=__name__)


class HierarchyError(RuntimeError):
    """Raised when a definition cannot be turned into a well-formed hierarchy."""


class CommandHierarchy:
    """Read-only facade over the graph built from a :class:`CommandDefinition`.

    Positions are node handles of subcommands; ``None`` stands for the binary
    level above every top-level subcommand.
    """

    def __init__(self, graph: Graph[Arg], definition: CommandDefinition) -> None:
        self._graph = graph
        self._definition = definition

    @property
    def graph(self) -> Graph[Arg]:
        return self._graph

    @property
    def definition(self) -> CommandDefinition:
        return self._definition

    def arg(self, handle: NodeHandle) -> Arg:
        return self._graph.payload(handle)

    def subcommands(self, position: NodeHandle | None) -> List[NodeHandle]:
        """Subcommands directly below ``position``, in declaration order."""

        children = self._graph.successors(position)
        return sorted(handle for handle in children if self._graph[handle].is_subcommand())

    def flags(self, position: NodeHandle | None) -> List[NodeHandle]:
        """Flags declared directly on ``position`` (binary flags for ``None``)."""

        children = self._graph.successors(position)
        return sorted(handle for handle in children if self._graph[handle].is_flag())

    def find_child(self, position: NodeHandle | None, word: str) -> NodeHandle | None:
        """Return the subcommand below ``position`` named or aliased ``word``.

        Siblings are tried in declaration order, so when collisions are
        allowed the first declared sibling wins at every depth.
        """

        for handle in self.subcommands(position):
            if self._graph[handle].subcommand.matches(word):
                return handle
        return None

    def enclosing(self, handle: NodeHandle) -> List[NodeHandle]:
        """Subcommands above ``handle``, nearest first."""

        return [
            ancestor
            for ancestor in self._graph.ancestors(handle)
            if self._graph[ancestor].is_subcommand()
        ]

    def path(self, handle: NodeHandle) -> List[str]:
        """Names from the top-level subcommand down to ``handle``."""

        names = [self._graph[ancestor].label for ancestor in reversed(self.enclosing(handle))]
        names.append(self._graph[handle].label)
        return names

    def resolve(self, names: Sequence[str]) -> NodeHandle:
        """Follow subcommand names (or aliases) from the binary level."""

        position: NodeHandle | None = None
        for depth, name in enumerate(names):
            child = self.find_child(position, name)
            if child is None:
                walked = " ".join(names[:depth]) or "<binary>"
                raise KeyError(f"no subcommand '{name}' under {walked}")
            position = child
        if position is None:
            raise KeyError("an empty command path does not name a subcommand")
        return position

    def describe(self) -> Dict[str, object]:
        """Structural statistics plus payload counts."""

        stats: Dict[str, object] = dict(self._graph.statistics())
        kinds = [payload for _, payload in self._graph.nodes()]
        stats["program"] = self._definition.program
        stats["subcommand_count"] = sum(1 for payload in kinds if payload.is_subcommand())
        stats["flag_count"] = sum(1 for payload in kinds if payload.is_flag())
        return stats


class HierarchyBuilder:
    """Walks a definition and inserts one node per subcommand and flag."""

    def __init__(
        self,
        policy: HierarchyPolicy | None = None,
        graph_policy: GraphPolicy | None = None,
    ) -> None:
        self._policy = policy or HierarchyPolicy()
        self._graph_policy = graph_policy or GraphPolicy()
        self._name_pattern = re.compile(self._policy.name_pattern)

    @classmethod
    def from_policies(cls, policies: Policies) -> "HierarchyBuilder":
        return cls(policies.hierarchy, policies.graph)

    @property
    def policy(self) -> HierarchyPolicy:
        return self._policy

    def build(self, definition: CommandDefinition) -> CommandHierarchy:
        graph: Graph[Arg] = Graph.create(self._graph_policy)
        try:
            if self._policy.include_binary_flags:
                for flag in definition.flags:
                    graph.insert_node(Arg.for_flag(flag))
            self._check_siblings(definition.subcommands, parent="<binary>")
            for subcommand in definition.subcommands:
                self._insert_subcommand(graph, subcommand, None)
        except GraphError as exc:
            _LOGGER.error(
                "Failed to materialise command hierarchy",
                program=definition.program,
                error=str(exc),
            )
            raise HierarchyError(f"cannot build hierarchy for '{definition.program}': {exc}") from exc

        _LOGGER.info(
            "Built command hierarchy",
            program=definition.program,
            nodes=graph.node_count,
            edges=graph.edge_count,
        )
        return CommandHierarchy(graph, definition)

    def _insert_subcommand(
        self,
        graph: Graph[Arg],
        config: SubCommandConfig,
        parent: NodeHandle | None,
    ) -> NodeHandle:
        if not self._name_pattern.fullmatch(config.name):
            raise HierarchyError(
                f"subcommand name '{config.name}' does not match {self._policy.name_pattern!r}"
            )
        payload = Arg.for_subcommand(config.to_subcommand())
        if parent is None:
            handle = graph.insert_node(payload)
        else:
            handle = graph.insert_node_under(parent, payload)
        for flag in config.flags:
            graph.insert_node_under(handle, Arg.for_flag(flag))
        self._check_siblings(config.subcommands, parent=config.name)
        for child in config.subcommands:
            self._insert_subcommand(graph, child, handle)
        return handle

    def _check_siblings(self, siblings: Sequence[SubCommandConfig], *, parent: str) -> None:
        if not self._policy.reject_alias_collisions:
            return
        owners: Dict[str, str] = {}
        for sibling in siblings:
            for word in (sibling.name, *sibling.aliases):
                owner = owners.get(word)
                if owner is not None and owner != sibling.name:
                    raise HierarchyError(
                        f"'{word}' under {parent} names both '{owner}' and '{sibling.name}'"
                    )
                owners[word] = sibling.name


def build_hierarchy(
    definition: CommandDefinition,
    policies: Policies | None = None,
) -> CommandHierarchy:
    """Build a :class:`CommandHierarchy` with the given (or default) policies."""

    return HierarchyBuilder.from_policies(policies or Policies()).build(definition)


__all__ = ["HierarchyError", "CommandHierarchy", "HierarchyBuilder", "build_hierarchy"]
