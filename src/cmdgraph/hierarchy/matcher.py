"""Resolve raw command-line words against a built hierarchy.

Only whole words are recognised. A word either names a subcommand below the
current position, spells a visible flag exactly (``-h`` or ``--help``), or is
a positional argument. A flag declared with ``takes_arg`` consumes the next
word verbatim as its value. Inline values (``--out=file``) and clustered
short flags (``-abc``) are not split; they simply fail to match a flag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from cmdgraph.config.policies import MatchingPolicy
from cmdgraph.entities.core import ArgKind, Flag
from cmdgraph.graph import NodeHandle
from cmdgraph.utils.logging import get_logger

from .builder import CommandHierarchy

_LOGGER = get_logger(module=__name__)

TERMINATOR = "--"


class MatchError(ValueError):
    """Raised for words the active matching policy refuses to record."""


@dataclass(slots=True)
class MatchEntry:
    """One input word and what it resolved to."""

    word: str
    kind: ArgKind
    handle: NodeHandle | None = None
    value: str | None = None

    def to_dict(self) -> dict:
        return {
            "word": self.word,
            "kind": self.kind.value,
            "handle": self.handle,
            "value": self.value,
        }


@dataclass(slots=True)
class MatchResult:
    """Outcome of matching a word list against a :class:`CommandHierarchy`."""

    subcommand: NodeHandle | None = None
    path: List[NodeHandle] = field(default_factory=list)
    command_path: List[str] = field(default_factory=list)
    flags: List[NodeHandle] = field(default_factory=list)
    arguments: List[str] = field(default_factory=list)
    unknown_flags: List[str] = field(default_factory=list)
    values: Dict[str, str] = field(default_factory=dict)
    entries: List[MatchEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "subcommand": self.subcommand,
            "path": list(self.path),
            "command_path": list(self.command_path),
            "flags": list(self.flags),
            "values": dict(self.values),
            "arguments": list(self.arguments),
            "unknown_flags": list(self.unknown_flags),
            "entries": [entry.to_dict() for entry in self.entries],
        }


def _looks_like_flag(word: str) -> bool:
    # "-" and "--" on their own are plain words
    return word.startswith("-") and word not in ("-", TERMINATOR)


class SubcommandMatcher:
    """Walks words left to right, descending into matched subcommands."""

    def __init__(self, hierarchy: CommandHierarchy, policy: MatchingPolicy | None = None) -> None:
        self._hierarchy = hierarchy
        self._policy = policy or MatchingPolicy()

    @property
    def policy(self) -> MatchingPolicy:
        return self._policy

    def visible_flags(self, position: NodeHandle | None) -> Dict[str, NodeHandle]:
        """Map every flag spelling usable at ``position`` to its node.

        Nearer declarations shadow outer ones: the position's own flags win
        over enclosing subcommands, which win over binary-level flags.
        """

        layers: List[NodeHandle | None] = []
        if position is not None:
            layers.append(position)
            if self._policy.inherit_flags:
                layers.extend(self._hierarchy.enclosing(position))
        layers.append(None)

        visible: Dict[str, NodeHandle] = {}
        for layer in layers:
            for handle in self._hierarchy.flags(layer):
                for spelling in self._flag(handle).spellings():
                    visible.setdefault(spelling, handle)
        return visible

    def _flag(self, handle: NodeHandle) -> Flag:
        flag = self._hierarchy.arg(handle).flag
        if flag is None:
            raise MatchError(f"node {handle} does not carry a flag")
        return flag

    def match(self, words: Iterable[str], *, start: NodeHandle | None = None) -> MatchResult:
        """Match ``words`` beginning at ``start`` (the binary level by default)."""

        result = MatchResult()
        position: NodeHandle | None = start
        flags = self.visible_flags(position)
        positional_seen = False
        remaining: List[str] = list(words)

        index = 0
        while index < len(remaining):
            word = remaining[index]
            index += 1

            if word == TERMINATOR and self._policy.allow_terminator:
                for rest in remaining[index:]:
                    self._record_argument(result, rest)
                break

            if _looks_like_flag(word):
                handle = flags.get(word)
                if handle is not None:
                    flag = self._flag(handle)
                    value: str | None = None
                    if flag.takes_arg:
                        if index >= len(remaining):
                            raise MatchError(
                                f"flag '{word}' at {self._describe(position)} expects a value"
                            )
                        value = remaining[index]
                        index += 1
                        result.values[flag.name] = value
                    result.flags.append(handle)
                    result.entries.append(MatchEntry(word, ArgKind.FLAG, handle, value))
                    continue
                if self._policy.unknown_flags == "error":
                    raise MatchError(f"unknown flag '{word}' at {self._describe(position)}")
                result.unknown_flags.append(word)
                result.entries.append(MatchEntry(word, ArgKind.UNKNOWN_FLAG))
                continue

            if not positional_seen:
                child = self._hierarchy.find_child(position, word)
                if child is not None:
                    position = child
                    flags = self.visible_flags(position)
                    result.path.append(child)
                    result.entries.append(MatchEntry(word, ArgKind.SUBCOMMAND, child))
                    continue

            positional_seen = True
            self._record_argument(result, word)

        result.subcommand = position
        result.command_path = [self._hierarchy.arg(handle).label for handle in result.path]
        _LOGGER.debug(
            "Matched words against hierarchy",
            words=len(remaining),
            command_path=result.command_path,
            flags=len(result.flags),
            unknown_flags=len(result.unknown_flags),
        )
        return result

    def _record_argument(self, result: MatchResult, word: str) -> None:
        result.arguments.append(word)
        result.entries.append(MatchEntry(word, ArgKind.ARGUMENT))

    def _describe(self, position: NodeHandle | None) -> str:
        if position is None:
            return "the binary level"
        return "'" + " ".join(self._hierarchy.path(position)) + "'"


def match_words(
    hierarchy: CommandHierarchy,
    words: Iterable[str],
    policy: MatchingPolicy | None = None,
) -> MatchResult:
    """Match ``words`` with a one-off :class:`SubcommandMatcher`."""

    return SubcommandMatcher(hierarchy, policy).match(words)


__all__ = [
    "MatchError",
    "MatchEntry",
    "MatchResult",
    "SubcommandMatcher",
    "match_words",
    "TERMINATOR",
]
