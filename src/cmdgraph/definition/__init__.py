"""Declarative command definitions."""

from __future__ import annotations

from .io import load_definition, parse_definition
from .models import CommandDefinition, SubCommandConfig
from .presets import PRESET_FLAGS, preset_flag

__all__ = [
    "CommandDefinition",
    "SubCommandConfig",
    "PRESET_FLAGS",
    "preset_flag",
    "load_definition",
    "parse_definition",
]
