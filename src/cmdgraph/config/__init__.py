"""Configuration utilities for cmdgraph."""

from .policies import (
    GraphPolicy,
    HierarchyPolicy,
    MatchingPolicy,
    ObservabilityPolicy,
    Policies,
    load_policies,
)
from .settings import PathsConfig, Settings, get_settings

__all__ = [
    "Settings",
    "PathsConfig",
    "get_settings",
    "Policies",
    "load_policies",
    "GraphPolicy",
    "HierarchyPolicy",
    "MatchingPolicy",
    "ObservabilityPolicy",
]
