"""Word matching policy models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class MatchingPolicy(BaseModel):
    """Controls how raw command-line words are resolved against a hierarchy."""

    allow_terminator: bool = Field(
        default=True,
        description="Treat every word after a bare '--' as a positional argument.",
    )
    inherit_flags: bool = Field(
        default=True,
        description="Flags declared on enclosing subcommands stay visible below them.",
    )
    unknown_flags: Literal["record", "error"] = Field(
        default="record",
        description="Record unrecognised flags in the result or fail the match.",
    )
