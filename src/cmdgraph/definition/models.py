"""Immutable declarations of a program's subcommands and flags."""

from __future__ import annotations

import re
from typing import Any, Iterator, List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cmdgraph.entities.core import Flag, SubCommand
from cmdgraph.utils.helpers import unique_preserving_order

from .presets import preset_flag

_NAME_PATTERN = re.compile(r"^\w+$")


def _expand_flags(value: Any) -> Any:
    """Accept preset names (``"help"``) next to full flag mappings."""

    if value is None:
        return ()
    if isinstance(value, (str, Flag)) or not isinstance(value, Sequence):
        value = [value]
    expanded: List[Any] = []
    for item in value:
        expanded.append(preset_flag(item) if isinstance(item, str) else item)
    return tuple(expanded)


def _check_flag_spellings(flags: Sequence[Flag]) -> None:
    seen: dict[str, str] = {}
    for flag in flags:
        for spelling in flag.spellings():
            owner = seen.get(spelling)
            if owner is not None:
                raise ValueError(f"flag '{flag.name}' reuses '{spelling}' already taken by '{owner}'")
            seen[spelling] = flag.name


def _check_unique_names(subcommands: Sequence["SubCommandConfig"]) -> None:
    names = [subcommand.name for subcommand in subcommands]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(
            "cannot have two subcommands with the same name at the same level: "
            + ", ".join(duplicates)
        )


class SubCommandConfig(BaseModel):
    """Declaration of one subcommand together with everything nested below it."""

    model_config = ConfigDict(frozen=True)

    name: str
    aliases: Tuple[str, ...] = Field(default_factory=tuple)
    flags: Tuple[Flag, ...] = Field(default_factory=tuple)
    subcommands: Tuple["SubCommandConfig", ...] = Field(default_factory=tuple)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not value or not _NAME_PATTERN.fullmatch(value):
            raise ValueError(f"a subcommand must be defined with a valid name, got '{value}'")
        return value

    @field_validator("aliases", mode="before")
    @classmethod
    def _normalize_aliases(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        return tuple(unique_preserving_order(value))

    @field_validator("flags", mode="before")
    @classmethod
    def _expand_presets(cls, value: Any) -> Any:
        return _expand_flags(value)

    @field_validator("flags")
    @classmethod
    def _validate_flags(cls, value: Tuple[Flag, ...]) -> Tuple[Flag, ...]:
        _check_flag_spellings(value)
        return value

    @field_validator("subcommands")
    @classmethod
    def _validate_subcommands(
        cls, value: Tuple["SubCommandConfig", ...]
    ) -> Tuple["SubCommandConfig", ...]:
        _check_unique_names(value)
        return value

    def to_subcommand(self) -> SubCommand:
        return SubCommand(name=self.name, aliases=self.aliases)

    def walk(self) -> Iterator["SubCommandConfig"]:
        """Yield this declaration and every nested one, depth first."""

        yield self
        for child in self.subcommands:
            yield from child.walk()


class CommandDefinition(BaseModel):
    """Top-level declaration of a program: binary flags plus subcommands."""

    model_config = ConfigDict(frozen=True)

    program: str = Field(default="program", min_length=1)
    description: str | None = None
    flags: Tuple[Flag, ...] = Field(default_factory=tuple)
    subcommands: Tuple[SubCommandConfig, ...] = Field(default_factory=tuple)

    @field_validator("flags", mode="before")
    @classmethod
    def _expand_presets(cls, value: Any) -> Any:
        return _expand_flags(value)

    @field_validator("flags")
    @classmethod
    def _validate_flags(cls, value: Tuple[Flag, ...]) -> Tuple[Flag, ...]:
        _check_flag_spellings(value)
        return value

    @field_validator("subcommands")
    @classmethod
    def _validate_subcommands(
        cls, value: Tuple[SubCommandConfig, ...]
    ) -> Tuple[SubCommandConfig, ...]:
        _check_unique_names(value)
        return value

    def walk(self) -> Iterator[SubCommandConfig]:
        for subcommand in self.subcommands:
            yield from subcommand.walk()

    def node_count(self) -> int:
        """Number of graph nodes the definition materialises into."""

        total = len(self.flags)
        for subcommand in self.walk():
            total += 1 + len(subcommand.flags)
        return total


SubCommandConfig.model_rebuild()


__all__ = ["SubCommandConfig", "CommandDefinition"]
