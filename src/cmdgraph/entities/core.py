"""Payloads stored on the nodes of a command hierarchy."""

from __future__ import annotations

import re
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_LONG_FLAG_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_-]*$")


class ArgKind(str, Enum):
    """Role of a node in the hierarchy or of a matched word.

    The builder only creates ``FLAG`` and ``SUBCOMMAND`` nodes and the matcher
    reports ``FLAG``, ``SUBCOMMAND``, ``ARGUMENT`` and ``UNKNOWN_FLAG`` entries.
    ``UNKNOWN`` is reserved for text payloads that callers attach themselves
    (``Arg.for_text(ArgKind.UNKNOWN, word)``) when a word has no known role.
    """

    FLAG = "flag"
    SUBCOMMAND = "subcommand"
    ARGUMENT = "argument"
    UNKNOWN = "unknown"
    UNKNOWN_FLAG = "unknown_flag"


class Flag(BaseModel):
    """A switch recognised by its short (``-h``) or long (``--help``) spelling."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    short: str | None = Field(default=None, description="Single character used after '-'.")
    long: str = Field(..., min_length=1, description="Word used after '--'.")
    takes_arg: bool = False

    @field_validator("short")
    @classmethod
    def _validate_short(cls, value: str | None) -> str | None:
        if value is None:
            return None
        if len(value) != 1 or not value.isalnum():
            raise ValueError("short flag must be a single alphanumeric character")
        return value

    @field_validator("long")
    @classmethod
    def _validate_long(cls, value: str) -> str:
        cleaned = value.strip()
        if not _LONG_FLAG_PATTERN.match(cleaned):
            raise ValueError(f"long flag '{value}' must not start with '-' or contain spaces")
        return cleaned

    def spellings(self) -> Tuple[str, ...]:
        """Every command-line word that selects this flag."""

        if self.short is None:
            return (f"--{self.long}",)
        return (f"-{self.short}", f"--{self.long}")

    def matches(self, word: str) -> bool:
        return word in self.spellings()


class SubCommand(BaseModel):
    """A named command level, optionally reachable through aliases."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    aliases: Tuple[str, ...] = Field(default_factory=tuple)

    def matches(self, word: str) -> bool:
        return word == self.name or word in self.aliases


class Arg(BaseModel):
    """Node payload: exactly one of ``flag``, ``subcommand`` or ``text``."""

    model_config = ConfigDict(frozen=True)

    kind: ArgKind
    flag: Flag | None = None
    subcommand: SubCommand | None = None
    text: str | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> "Arg":
        populated = [
            name
            for name, value in (("flag", self.flag), ("subcommand", self.subcommand), ("text", self.text))
            if value is not None
        ]
        if len(populated) != 1:
            raise ValueError("an Arg carries exactly one of flag, subcommand or text")
        expected = {
            ArgKind.FLAG: "flag",
            ArgKind.SUBCOMMAND: "subcommand",
        }.get(self.kind, "text")
        if populated[0] != expected:
            raise ValueError(f"{self.kind.value} args must populate '{expected}'")
        return self

    @classmethod
    def for_flag(cls, flag: Flag) -> "Arg":
        return cls(kind=ArgKind.FLAG, flag=flag)

    @classmethod
    def for_subcommand(cls, subcommand: SubCommand) -> "Arg":
        return cls(kind=ArgKind.SUBCOMMAND, subcommand=subcommand)

    @classmethod
    def for_text(cls, kind: ArgKind, text: str) -> "Arg":
        return cls(kind=kind, text=text)

    @property
    def label(self) -> str:
        if self.flag is not None:
            return self.flag.name
        if self.subcommand is not None:
            return self.subcommand.name
        return self.text or ""

    def is_flag(self) -> bool:
        return self.kind is ArgKind.FLAG

    def is_subcommand(self) -> bool:
        return self.kind is ArgKind.SUBCOMMAND


__all__ = ["ArgKind", "Flag", "SubCommand", "Arg"]
