"""Loading command definitions from YAML or JSON files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

import yaml

from cmdgraph.utils.logging import get_logger

from .models import CommandDefinition

_LOGGER = get_logger(module=__name__)


def parse_definition(payload: Mapping[str, Any]) -> CommandDefinition:
    """Validate an in-memory mapping into a :class:`CommandDefinition`."""

    if not isinstance(payload, Mapping):
        raise ValueError("a command definition must be a mapping at the top level")
    return CommandDefinition.model_validate(dict(payload))


def load_definition(path: str | Path) -> CommandDefinition:
    """Read a definition from ``.yaml``/``.yml`` or ``.json`` files."""

    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"definition file not found: {source}")
    with source.open("r", encoding="utf-8") as handle:
        if source.suffix.lower() == ".json":
            loaded = json.load(handle)
        else:
            loaded = yaml.safe_load(handle)
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, Mapping):
        raise ValueError(f"definition file '{source}' must contain a mapping at the top level")
    definition = parse_definition(loaded)
    _LOGGER.info(
        "Loaded command definition",
        path=str(source),
        program=definition.program,
        subcommands=sum(1 for _ in definition.walk()),
    )
    return definition


__all__ = ["load_definition", "parse_definition"]
