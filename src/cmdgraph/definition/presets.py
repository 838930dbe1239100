"""Standard flags every command-line program tends to offer."""

from __future__ import annotations

from typing import Dict

from cmdgraph.entities.core import Flag

PRESET_FLAGS: Dict[str, Flag] = {
    "help": Flag(name="help", short="h", long="help"),
    "verbose": Flag(name="verbose", short="V", long="verbose"),
    "version": Flag(name="version", short="v", long="version"),
    "license": Flag(name="license", short="L", long="license"),
    "debug": Flag(name="debug", short="d", long="debug"),
}


def preset_flag(name: str) -> Flag:
    """Return the standard flag registered under ``name``."""

    try:
        return PRESET_FLAGS[name.strip().lower()]
    except KeyError:
        known = ", ".join(sorted(PRESET_FLAGS))
        raise ValueError(f"unknown preset flag '{name}' (known presets: {known})") from None


__all__ = ["PRESET_FLAGS", "preset_flag"]
