"""Domain entities for cmdgraph."""

from .core import Arg, ArgKind, Flag, SubCommand

__all__ = ["ArgKind", "Flag", "SubCommand", "Arg"]
