"""Command hierarchy construction, matching and export."""

from __future__ import annotations

from .builder import CommandHierarchy, HierarchyBuilder, HierarchyError, build_hierarchy
from .io import export_graph_structure, hierarchy_to_dict, render_tree
from .matcher import MatchEntry, MatchError, MatchResult, SubcommandMatcher, match_words

__all__ = [
    "build_hierarchy",
    "CommandHierarchy",
    "HierarchyBuilder",
    "HierarchyError",
    "SubcommandMatcher",
    "MatchEntry",
    "MatchResult",
    "MatchError",
    "match_words",
    "export_graph_structure",
    "hierarchy_to_dict",
    "render_tree",
]
