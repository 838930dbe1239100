"""Runtime settings layered from YAML files, the environment and callers."""

from __future__ import annotations

import argparse
import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Sequence

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .policies import Policies, load_policies

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "config"

ENVIRONMENTS = ("development", "testing", "production")
SETTINGS_ENV_PREFIX = "CMDGRAPH_SETTINGS__"


def merge_layers(*layers: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep-merge mappings; later layers win, nested mappings merge key by key."""

    merged: Dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, Mapping):
                merged[key] = merge_layers(current, value)
            elif isinstance(value, Mapping):
                merged[key] = merge_layers(value)
            else:
                merged[key] = value
    return merged


def read_layer(path: Path) -> Dict[str, Any]:
    """Read one YAML layer; a missing or empty file contributes nothing."""

    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle)
    if loaded is None:
        return {}
    if not isinstance(loaded, Mapping):
        raise ValueError(f"configuration layer '{path}' must be a mapping")
    return dict(loaded)


def environment_layer(environ: Mapping[str, str] | None = None) -> Dict[str, Any]:
    """Nested overrides from ``CMDGRAPH_SETTINGS__A__B=value`` variables."""

    source = os.environ if environ is None else environ
    layer: Dict[str, Any] = {}
    for key, raw in source.items():
        if not key.startswith(SETTINGS_ENV_PREFIX):
            continue
        path = [part.lower() for part in key[len(SETTINGS_ENV_PREFIX) :].split("__") if part]
        if not path:
            continue
        try:
            value: Any = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        for part in reversed(path[1:]):
            value = {part: value}
        layer = merge_layers(layer, {path[0]: value})
    return layer


def config_layers(config_dir: Path, environment: str) -> List[Dict[str, Any]]:
    """Layers below caller arguments, lowest precedence first."""

    return [
        read_layer(config_dir / "default.yaml"),
        read_layer(config_dir / f"{environment}.yaml"),
        environment_layer(),
    ]


class PathsConfig(BaseModel):
    """Where logs and exported graphs are written."""

    logs_dir: Path = Field(default=PROJECT_ROOT / "logs")
    output_dir: Path = Field(default=PROJECT_ROOT / "output")

    def ensure_exists(self) -> None:
        for name in type(self).model_fields:
            directory = Path(getattr(self, name))
            if not directory.is_absolute():
                directory = PROJECT_ROOT / directory
            directory.mkdir(parents=True, exist_ok=True)
            object.__setattr__(self, name, directory)


class Settings(BaseSettings):
    """Primary configuration object for cmdgraph.

    Values resolve from (highest first): keyword arguments, ``CMDGRAPH_*``
    variables, ``CMDGRAPH_SETTINGS__*`` nested overrides, ``<environment>.yaml``
    and ``default.yaml`` under ``config_dir``, then the field defaults. The
    ``policies`` section is validated through :func:`load_policies`, so
    ``CMDGRAPH_POLICY__*`` overrides apply to it as well.
    """

    model_config = SettingsConfigDict(
        env_prefix="CMDGRAPH_",
        validate_assignment=True,
        extra="allow",
    )

    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Selects the <environment>.yaml layer.",
    )
    config_dir: Path = Field(default=DEFAULT_CONFIG_DIR)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    create_dirs: bool = Field(
        default=False,
        description="Create the directories in `paths` while validating.",
    )
    policies: Policies

    @model_validator(mode="before")
    @classmethod
    def _layer_sources(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        explicit = {key: value for key, value in values.items() if value is not None}
        config_dir = Path(explicit.get("config_dir") or DEFAULT_CONFIG_DIR)
        environment = explicit.get("environment") or os.getenv("CMDGRAPH_ENV", "development")

        policies = explicit.pop("policies", None)
        resolved = merge_layers(*config_layers(config_dir, environment), explicit)
        if isinstance(policies, Policies):
            resolved["policies"] = policies
        else:
            layered = resolved.get("policies") or {}
            resolved["policies"] = load_policies(merge_layers(layered, policies or {}))
        return resolved

    @model_validator(mode="after")
    def _create_directories(self) -> "Settings":
        if self.create_dirs:
            self.paths.ensure_exists()
        return self

    @property
    def policy_version(self) -> str:
        return self.policies.policy_version

    @property
    def log_file(self) -> Path:
        return self.paths.logs_dir / "cmdgraph.log"

    @classmethod
    def from_args(cls, argv: Sequence[str] | None = None) -> "Settings":
        """Build settings from ``--environment``/``--config-dir``/``--log-level`` style flags."""

        parser = argparse.ArgumentParser(prog="cmdgraph-settings")
        parser.add_argument("--environment", choices=ENVIRONMENTS)
        parser.add_argument("--config-dir", type=Path, help="Directory holding the YAML layers.")
        parser.add_argument("--log-level", help="Override policies.observability.log_level.")
        parser.add_argument("--create-dirs", action="store_true")
        args = parser.parse_args(list(argv) if argv is not None else None)

        overrides: Dict[str, Any] = {}
        if args.environment:
            overrides["environment"] = args.environment
        if args.config_dir:
            overrides["config_dir"] = args.config_dir
        if args.log_level:
            overrides["policies"] = {"observability": {"log_level": args.log_level}}
        if args.create_dirs:
            overrides["create_dirs"] = True
        return cls(**overrides)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a process-wide settings instance."""

    return Settings()


__all__ = [
    "Settings",
    "PathsConfig",
    "get_settings",
    "merge_layers",
    "read_layer",
    "environment_layer",
    "config_layers",
    "PROJECT_ROOT",
]
