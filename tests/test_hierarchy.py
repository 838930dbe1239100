"""Tests for building, querying and exporting command hierarchies."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from rich.console import Console

from cmdgraph.config.policies import GraphPolicy, HierarchyPolicy, Policies
from cmdgraph.definition import CommandDefinition, parse_definition
from cmdgraph.entities import ArgKind
from cmdgraph.hierarchy import (
    CommandHierarchy,
    HierarchyBuilder,
    HierarchyError,
    build_hierarchy,
    export_graph_structure,
    hierarchy_to_dict,
    match_words,
    render_tree,
)


def _definition() -> CommandDefinition:
    return parse_definition(
        {
            "program": "tool",
            "flags": ["help", "version"],
            "subcommands": [
                {
                    "name": "remote",
                    "aliases": ["rem"],
                    "flags": ["verbose"],
                    "subcommands": [
                        {"name": "add", "flags": [{"name": "force", "short": "f", "long": "force"}]},
                        {"name": "remove", "aliases": ["rm"]},
                    ],
                },
                {"name": "status"},
            ],
        }
    )


@pytest.fixture()
def hierarchy() -> CommandHierarchy:
    return build_hierarchy(_definition())


def test_binary_flags_and_top_level_subcommands_are_roots(hierarchy: CommandHierarchy) -> None:
    roots = hierarchy.graph.roots().to_list()
    labels = [hierarchy.arg(handle).label for handle in roots]
    assert labels == ["help", "version", "remote", "status"]
    assert [hierarchy.arg(h).label for h in hierarchy.flags(None)] == ["help", "version"]
    assert [hierarchy.arg(h).label for h in hierarchy.subcommands(None)] == ["remote", "status"]


def test_children_are_reported_in_declaration_order(hierarchy: CommandHierarchy) -> None:
    remote = hierarchy.resolve(["remote"])
    assert [hierarchy.arg(h).label for h in hierarchy.subcommands(remote)] == ["add", "remove"]
    assert [hierarchy.arg(h).label for h in hierarchy.flags(remote)] == ["verbose"]
    # the raw successor view walks the most recent edge first
    raw = [hierarchy.arg(h).label for h in hierarchy.graph.successors(remote)]
    assert raw == ["remove", "add", "verbose"]


def test_resolve_follows_names_and_aliases(hierarchy: CommandHierarchy) -> None:
    remove = hierarchy.resolve(["rem", "rm"])
    assert hierarchy.arg(remove).kind is ArgKind.SUBCOMMAND
    assert hierarchy.path(remove) == ["remote", "remove"]
    assert hierarchy.resolve(["remote", "remove"]) == remove


def test_resolve_reports_missing_names(hierarchy: CommandHierarchy) -> None:
    with pytest.raises(KeyError) as excinfo:
        hierarchy.resolve(["remote", "rename"])
    assert "no subcommand 'rename' under remote" in str(excinfo.value)
    with pytest.raises(KeyError):
        hierarchy.resolve(["add"])
    with pytest.raises(KeyError):
        hierarchy.resolve([])


def test_enclosing_lists_subcommands_nearest_first(hierarchy: CommandHierarchy) -> None:
    remote = hierarchy.resolve(["remote"])
    add = hierarchy.resolve(["remote", "add"])
    force = hierarchy.flags(add)[0]
    assert hierarchy.enclosing(force) == [add, remote]
    assert hierarchy.path(force) == ["remote", "add", "force"]
    assert hierarchy.enclosing(remote) == []


def test_find_child_ignores_flags(hierarchy: CommandHierarchy) -> None:
    assert hierarchy.find_child(None, "help") is None
    assert hierarchy.find_child(None, "status") == hierarchy.resolve(["status"])


def test_every_node_is_reachable_from_a_root(hierarchy: CommandHierarchy) -> None:
    graph = hierarchy.graph
    seen = set()
    pending = graph.roots().to_list()
    while pending:
        handle = pending.pop()
        if handle in seen:
            continue
        seen.add(handle)
        pending.extend(graph.successors(handle))
    assert seen == {handle for handle, _ in graph.nodes()}
    assert graph.node_count == _definition().node_count()


def test_binary_flags_can_be_excluded() -> None:
    builder = HierarchyBuilder(HierarchyPolicy(include_binary_flags=False))
    hierarchy = builder.build(_definition())
    assert hierarchy.flags(None) == []
    assert hierarchy.graph.node_count == _definition().node_count() - 2


def test_alias_collisions_between_siblings_are_rejected() -> None:
    definition = CommandDefinition(
        subcommands=[{"name": "remove", "aliases": ["rm"]}, {"name": "rm"}],
    )
    with pytest.raises(HierarchyError) as excinfo:
        build_hierarchy(definition)
    assert "'rm' under <binary> names both 'remove' and 'rm'" in str(excinfo.value)

    lenient = HierarchyBuilder(HierarchyPolicy(reject_alias_collisions=False))
    hierarchy = lenient.build(definition)
    # the first declared sibling wins the lookup
    assert hierarchy.resolve(["rm"]) == hierarchy.resolve(["remove"])


def test_first_declared_sibling_wins_at_every_depth() -> None:
    siblings = [{"name": "remove", "aliases": ["rm"]}, {"name": "rm"}]
    definition = CommandDefinition(
        subcommands=[*siblings, {"name": "top", "subcommands": siblings}],
    )
    hierarchy = HierarchyBuilder(HierarchyPolicy(reject_alias_collisions=False)).build(definition)

    assert hierarchy.arg(hierarchy.resolve(["rm"])).label == "remove"
    assert hierarchy.arg(hierarchy.resolve(["top", "rm"])).label == "remove"
    assert match_words(hierarchy, ["top", "rm"]).command_path == ["top", "remove"]


def test_name_pattern_policy_is_enforced() -> None:
    policy = HierarchyPolicy(name_pattern=r"[a-z]+")
    definition = CommandDefinition(subcommands=[{"name": "build2"}])
    with pytest.raises(HierarchyError):
        HierarchyBuilder(policy).build(definition)


def test_node_limit_surfaces_as_hierarchy_error() -> None:
    builder = HierarchyBuilder(graph_policy=GraphPolicy(max_nodes=3))
    with pytest.raises(HierarchyError):
        builder.build(_definition())


def test_builder_from_policies_uses_every_section() -> None:
    policies = Policies(hierarchy={"include_binary_flags": False}, graph={"max_nodes": 50})
    builder = HierarchyBuilder.from_policies(policies)
    assert builder.policy.include_binary_flags is False
    assert builder.build(_definition()).flags(None) == []


def test_describe_reports_counts(hierarchy: CommandHierarchy) -> None:
    summary = hierarchy.describe()
    assert summary["program"] == "tool"
    assert summary["node_count"] == 8
    assert summary["edge_count"] == 4
    assert summary["root_count"] == 4
    assert summary["subcommand_count"] == 4
    assert summary["flag_count"] == 4
    assert summary["depth"] == 3


def test_hierarchy_to_dict(hierarchy: CommandHierarchy) -> None:
    snapshot = hierarchy_to_dict(hierarchy)
    assert snapshot["program"] == "tool"
    assert snapshot["roots"] == [0, 1, 2, 7]
    remote = snapshot["nodes"][2]
    assert remote == {"handle": 2, "kind": "subcommand", "label": "remote", "aliases": ["rem"]}
    help_flag = snapshot["nodes"][0]
    assert help_flag["flag"]["short"] == "h"
    assert {"source": 2, "target": 3} in snapshot["edges"]


def test_export_formats(tmp_path: Path, hierarchy: CommandHierarchy) -> None:
    json_path = export_graph_structure(hierarchy, tmp_path / "out" / "tool.json")
    payload = json.loads(json_path.read_text(encoding="utf-8"))
    assert len(payload["nodes"]) == 8

    adjacency_path = export_graph_structure(hierarchy, tmp_path / "adj.json", format="adjacency")
    adjacency = json.loads(adjacency_path.read_text(encoding="utf-8"))
    assert adjacency["2"] == [6, 4, 3]
    assert adjacency["0"] == []

    dot_path = export_graph_structure(hierarchy, tmp_path / "tool.dot", format="DOT")
    dot = dot_path.read_text(encoding="utf-8")
    assert dot.startswith('digraph "tool" {')
    assert 'n2 [label="remote (rem)", shape=box];' in dot
    assert 'n0 [label="-h, --help", shape=ellipse];' in dot
    assert "n2 -> n3;" in dot

    with pytest.raises(ValueError):
        export_graph_structure(hierarchy, tmp_path / "tool.xml", format="xml")


def test_render_tree_lists_flags_before_subcommands(hierarchy: CommandHierarchy) -> None:
    console = Console(record=True, width=80, color_system=None)
    console.print(render_tree(hierarchy))
    text = console.export_text()
    lines = [line for line in text.splitlines() if line.strip()]
    assert lines[0].strip() == "tool"
    assert text.index("--help") < text.index("remote (rem)") < text.index("status")
    assert text.index("-f, --force") < text.index("remove (rm)")
