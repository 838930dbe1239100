"""Policies governing graph limits, hierarchy building, matching and logging."""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Tuple

import yaml
from pydantic import BaseModel, Field, model_validator

from .graph import GraphPolicy
from .hierarchy import HierarchyPolicy
from .matching import MatchingPolicy
from .observability import LogLevel, ObservabilityPolicy

POLICY_ENV_PREFIX = "CMDGRAPH_POLICY__"


class Policies(BaseModel):
    """Every policy section, versioned together."""

    policy_version: str = Field(default="2026-10-01")
    graph: GraphPolicy = Field(default_factory=GraphPolicy)
    hierarchy: HierarchyPolicy = Field(default_factory=HierarchyPolicy)
    matching: MatchingPolicy = Field(default_factory=MatchingPolicy)
    observability: ObservabilityPolicy = Field(default_factory=ObservabilityPolicy)

    @model_validator(mode="after")
    def _require_version(self) -> "Policies":
        if not self.policy_version.strip():
            raise ValueError("policy_version must not be blank")
        return self


def iter_policy_overrides(
    environ: Mapping[str, str] | None = None,
) -> Iterator[Tuple[List[str], Any]]:
    """Yield ``(path, value)`` pairs from ``CMDGRAPH_POLICY__A__B=value`` variables.

    Path segments are lowercased. Values are JSON-decoded when they parse
    (``12`` becomes an int, ``true`` a bool) and kept as strings otherwise.
    """

    source = os.environ if environ is None else environ
    for key in sorted(source):
        if not key.startswith(POLICY_ENV_PREFIX):
            continue
        path = [segment.lower() for segment in key[len(POLICY_ENV_PREFIX) :].split("__") if segment]
        if not path:
            continue
        raw = source[key]
        try:
            value: Any = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        yield path, value


def apply_override(tree: Dict[str, Any], path: List[str], value: Any) -> None:
    """Set ``value`` at ``path`` inside ``tree``, creating sections on the way."""

    cursor = tree
    for depth, segment in enumerate(path[:-1], start=1):
        section = cursor.setdefault(segment, {})
        if not isinstance(section, dict):
            walked = "/".join(path[:depth])
            raise ValueError(f"cannot override '{'/'.join(path)}': '{walked}' is not a section")
        cursor = section
    cursor[path[-1]] = value


def _read_policy_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Policy file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle)
    if loaded is None:
        return {}
    if not isinstance(loaded, Mapping):
        raise ValueError(f"Policy file '{path}' must contain a mapping at the top level")
    return dict(loaded)


def load_policies(source: os.PathLike[str] | str | Mapping[str, Any]) -> Policies:
    """Validate policies from a mapping or YAML file after environment overrides.

    The caller's mapping is copied before overrides are applied.
    """

    if isinstance(source, Mapping):
        tree: Dict[str, Any] = copy.deepcopy(dict(source))
    else:
        tree = _read_policy_file(Path(source))
    for path, value in iter_policy_overrides():
        apply_override(tree, path, value)
    return Policies.model_validate(tree)


__all__ = [
    "Policies",
    "load_policies",
    "iter_policy_overrides",
    "apply_override",
    "GraphPolicy",
    "HierarchyPolicy",
    "MatchingPolicy",
    "ObservabilityPolicy",
    "LogLevel",
]
