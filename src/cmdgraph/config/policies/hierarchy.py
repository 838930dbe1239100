"""Hierarchy construction policy models."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator


class HierarchyPolicy(BaseModel):
    """Configuration controlling how command definitions become graphs."""

    name_pattern: str = Field(
        default=r"^\w+$",
        min_length=1,
        description="Regular expression every subcommand name must match.",
    )
    reject_alias_collisions: bool = Field(
        default=True,
        description="Fail when an alias shadows a sibling subcommand name or alias.",
    )
    include_binary_flags: bool = Field(
        default=True,
        description="Insert flags declared at the binary level as standalone root nodes.",
    )

    @field_validator("name_pattern")
    @classmethod
    def _compile_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"name_pattern is not a valid regular expression: {exc}") from exc
        return value
