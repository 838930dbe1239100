"""Tests for matching raw words against a command hierarchy."""

from __future__ import annotations

import pytest

from cmdgraph.config.policies import MatchingPolicy
from cmdgraph.definition import parse_definition
from cmdgraph.entities import ArgKind
from cmdgraph.graph import InvalidHandle, NodeHandle
from cmdgraph.hierarchy import (
    CommandHierarchy,
    MatchError,
    SubcommandMatcher,
    build_hierarchy,
    match_words,
)


@pytest.fixture()
def hierarchy() -> CommandHierarchy:
    definition = parse_definition(
        {
            "program": "git",
            "flags": ["help", "version"],
            "subcommands": [
                {
                    "name": "remote",
                    "flags": ["verbose"],
                    "subcommands": [
                        {
                            "name": "add",
                            "flags": [{"name": "verify", "short": "v", "long": "verify"}],
                        },
                        {"name": "remove", "aliases": ["rm"]},
                    ],
                },
                {"name": "status", "flags": [{"name": "short", "short": "s", "long": "short"}]},
            ],
        }
    )
    return build_hierarchy(definition)


def _labels(hierarchy: CommandHierarchy, handles) -> list[str]:
    return [hierarchy.arg(handle).label for handle in handles]


def test_empty_input_stays_at_binary_level(hierarchy: CommandHierarchy) -> None:
    result = match_words(hierarchy, [])
    assert result.subcommand is None
    assert result.command_path == []
    assert result.entries == []


def test_subcommands_by_name_and_alias(hierarchy: CommandHierarchy) -> None:
    result = match_words(hierarchy, ["remote", "rm", "origin"])
    assert result.command_path == ["remote", "remove"]
    assert result.subcommand == hierarchy.resolve(["remote", "remove"])
    assert result.arguments == ["origin"]
    assert [entry.kind for entry in result.entries] == [
        ArgKind.SUBCOMMAND,
        ArgKind.SUBCOMMAND,
        ArgKind.ARGUMENT,
    ]


def test_flags_are_inherited_from_enclosing_levels(hierarchy: CommandHierarchy) -> None:
    result = match_words(hierarchy, ["remote", "rm", "--verbose", "-h"])
    assert _labels(hierarchy, result.flags) == ["verbose", "help"]
    assert result.unknown_flags == []


def test_nearer_flags_shadow_outer_spellings(hierarchy: CommandHierarchy) -> None:
    at_add = match_words(hierarchy, ["remote", "add", "-v"])
    assert _labels(hierarchy, at_add.flags) == ["verify"]

    at_binary = match_words(hierarchy, ["-v"])
    assert _labels(hierarchy, at_binary.flags) == ["version"]


def test_sibling_flags_are_not_visible(hierarchy: CommandHierarchy) -> None:
    result = match_words(hierarchy, ["remote", "--short"])
    assert result.flags == []
    assert result.unknown_flags == ["--short"]
    assert result.entries[-1].kind is ArgKind.UNKNOWN_FLAG


def test_flags_can_precede_subcommands(hierarchy: CommandHierarchy) -> None:
    result = match_words(hierarchy, ["--help", "status", "-s"])
    assert result.command_path == ["status"]
    assert _labels(hierarchy, result.flags) == ["help", "short"]


def test_inheritance_can_be_disabled(hierarchy: CommandHierarchy) -> None:
    matcher = SubcommandMatcher(hierarchy, MatchingPolicy(inherit_flags=False))
    result = matcher.match(["remote", "add", "--verbose", "--help"])
    assert result.unknown_flags == ["--verbose"]
    # binary-level flags remain visible everywhere
    assert _labels(hierarchy, result.flags) == ["help"]


def test_unknown_flags_raise_in_error_mode(hierarchy: CommandHierarchy) -> None:
    matcher = SubcommandMatcher(hierarchy, MatchingPolicy(unknown_flags="error"))
    with pytest.raises(MatchError) as excinfo:
        matcher.match(["remote", "add", "--dry-run"])
    assert "'--dry-run' at 'remote add'" in str(excinfo.value)
    with pytest.raises(MatchError):
        matcher.match(["--nope"])


def test_positional_word_stops_subcommand_descent(hierarchy: CommandHierarchy) -> None:
    result = match_words(hierarchy, ["remote", "origin", "add"])
    assert result.command_path == ["remote"]
    assert result.arguments == ["origin", "add"]


def test_terminator_passes_remaining_words_through(hierarchy: CommandHierarchy) -> None:
    result = match_words(hierarchy, ["status", "--", "--help", "remote"])
    assert result.command_path == ["status"]
    assert result.flags == []
    assert result.arguments == ["--help", "remote"]

    literal = match_words(hierarchy, ["status", "--"], MatchingPolicy(allow_terminator=False))
    assert literal.arguments == ["--"]


def test_single_dash_is_an_argument(hierarchy: CommandHierarchy) -> None:
    result = match_words(hierarchy, ["status", "-"])
    assert result.arguments == ["-"]
    assert result.unknown_flags == []


def test_matching_from_a_start_position(hierarchy: CommandHierarchy) -> None:
    remote = hierarchy.resolve(["remote"])
    matcher = SubcommandMatcher(hierarchy)
    result = matcher.match(["add", "-v"], start=remote)
    assert result.command_path == ["add"]
    assert _labels(hierarchy, result.flags) == ["verify"]

    with pytest.raises(InvalidHandle):
        matcher.match(["add"], start=NodeHandle(99))


def test_visible_flags_map_every_spelling(hierarchy: CommandHierarchy) -> None:
    matcher = SubcommandMatcher(hierarchy)
    visible = matcher.visible_flags(hierarchy.resolve(["status"]))
    assert set(visible) == {"-s", "--short", "-h", "--help", "-v", "--version"}


def test_result_to_dict_is_json_ready(hierarchy: CommandHierarchy) -> None:
    payload = match_words(hierarchy, ["status", "--bogus", "file"]).to_dict()
    assert payload["command_path"] == ["status"]
    assert payload["unknown_flags"] == ["--bogus"]
    assert payload["arguments"] == ["file"]
    assert payload["entries"][1] == {
        "word": "--bogus",
        "kind": "unknown_flag",
        "handle": None,
        "value": None,
    }
    assert payload["values"] == {}


@pytest.fixture()
def valued_hierarchy() -> CommandHierarchy:
    definition = parse_definition(
        {
            "program": "make",
            "flags": [{"name": "config", "short": "c", "long": "config", "takes_arg": True}],
            "subcommands": [
                {
                    "name": "build",
                    "flags": [{"name": "jobs", "short": "j", "long": "jobs", "takes_arg": True}],
                },
            ],
        }
    )
    return build_hierarchy(definition)


def test_value_flag_consumes_the_next_word(valued_hierarchy: CommandHierarchy) -> None:
    result = match_words(valued_hierarchy, ["--config", "build"])
    assert result.command_path == []
    assert result.values == {"config": "build"}
    assert result.arguments == []
    assert result.entries[0].value == "build"

    nested = match_words(valued_hierarchy, ["-c", "ci.yaml", "build", "-j", "4", "all"])
    assert nested.command_path == ["build"]
    assert nested.values == {"config": "ci.yaml", "jobs": "4"}
    assert nested.arguments == ["all"]
    assert [entry.kind for entry in nested.entries] == [
        ArgKind.FLAG,
        ArgKind.SUBCOMMAND,
        ArgKind.FLAG,
        ArgKind.ARGUMENT,
    ]


def test_value_is_taken_verbatim(valued_hierarchy: CommandHierarchy) -> None:
    result = match_words(valued_hierarchy, ["build", "--jobs", "--", "x"])
    assert result.values == {"jobs": "--"}
    assert result.arguments == ["x"]


def test_value_flag_without_a_value_is_rejected(valued_hierarchy: CommandHierarchy) -> None:
    with pytest.raises(MatchError) as excinfo:
        match_words(valued_hierarchy, ["build", "-j"])
    assert "flag '-j' at 'build' expects a value" in str(excinfo.value)
