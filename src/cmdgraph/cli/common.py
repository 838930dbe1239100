"""State, error type and loading helpers shared by the CLI commands."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

import click
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel

from cmdgraph.config.policies import apply_override
from cmdgraph.config.settings import Settings, merge_layers
from cmdgraph.definition import load_definition
from cmdgraph.graph import GraphError
from cmdgraph.hierarchy import CommandHierarchy, HierarchyBuilder, HierarchyError
from cmdgraph.utils.logging import configure_logging, get_logger, log_timing, logging_context

console = Console()
_LOGGER = get_logger(module=__name__)


class CLIError(click.ClickException):
    """User-facing failure reported as ``Error: ...`` with exit code 2."""

    exit_code = 2


@dataclass(frozen=True, slots=True)
class CLIState:
    """Resolved settings carried on ``typer.Context.obj``."""

    settings: Settings
    overrides: Dict[str, Any] = field(default_factory=dict)
    verbose: bool = False

    @property
    def environment(self) -> str:
        return self.settings.environment


def parse_override(argument: str) -> Dict[str, Any]:
    """Turn ``a.b.c=value`` into ``{"a": {"b": {"c": value}}}``.

    The value is JSON-decoded when it parses, so ``=5`` and ``=false`` give
    an int and a bool while ``=error`` stays a string.
    """

    dotted, separator, raw = argument.partition("=")
    if not separator:
        raise typer.BadParameter(f"expected dotted.key=value, got '{argument}'")
    path = [segment.strip() for segment in dotted.split(".") if segment.strip()]
    if not path:
        raise typer.BadParameter(f"override '{argument}' has an empty key")
    try:
        value: Any = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    tree: Dict[str, Any] = {}
    apply_override(tree, path, value)
    return tree


def merge_overrides(overrides: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Deep-merge parsed overrides; later ones win."""

    return merge_layers(*overrides)


def resolve_settings(environment: str | None, overrides: Mapping[str, Any]) -> Settings:
    payload = dict(overrides)
    if environment:
        payload["environment"] = environment
    try:
        return Settings(**payload)
    except ValidationError as exc:
        raise CLIError(f"Invalid configuration ({exc.error_count()} error(s)):\n{exc}") from exc


def configure_state(
    ctx: typer.Context,
    *,
    environment: str | None,
    overrides: Iterable[Mapping[str, Any]],
    verbose: bool,
) -> CLIState:
    """Resolve settings, configure logging and store the state on ``ctx``."""

    merged = merge_overrides(overrides)
    settings = resolve_settings(environment, merged)
    configure_logging(settings, level="DEBUG" if verbose else None)
    state = CLIState(settings=settings, overrides=merged, verbose=verbose)
    ctx.obj = state
    return state


def get_state(ctx: typer.Context) -> CLIState:
    state = ctx.find_object(CLIState)
    if state is None:
        raise CLIError("CLI state was not initialised by the root callback")
    return state


def render_json(title: str, content: Mapping[str, Any]) -> None:
    console.print(Panel(JSON.from_data(content), title=title, border_style="cyan"))


def require_file(path: str | Path) -> Path:
    """Resolve ``path`` and fail unless it names an existing file."""

    target = Path(path).expanduser().resolve()
    if not target.is_file():
        raise CLIError(f"Path does not exist: {target}")
    return target


def load_hierarchy(state: CLIState, definition_path: str | Path) -> CommandHierarchy:
    """Load a definition file and build its hierarchy under the active policies."""

    path = require_file(definition_path)
    try:
        with logging_context(definition=path.name), log_timing("build_hierarchy"):
            definition = load_definition(path)
            return HierarchyBuilder.from_policies(state.settings.policies).build(definition)
    except ValidationError as exc:
        raise CLIError(f"Invalid definition {path.name}:\n{exc}") from exc
    except (HierarchyError, GraphError, ValueError) as exc:
        _LOGGER.error("Unable to build hierarchy", path=str(path), error=str(exc))
        raise CLIError(str(exc)) from exc


__all__ = [
    "CLIError",
    "CLIState",
    "console",
    "configure_state",
    "get_state",
    "load_hierarchy",
    "merge_overrides",
    "parse_override",
    "render_json",
    "require_file",
    "resolve_settings",
]
