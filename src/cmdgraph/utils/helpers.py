"""General-purpose helpers for file output and word handling."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List

from .logging import get_logger

_LOGGER = get_logger(module=__name__)


def ensure_directory(path: Path | str) -> Path:
    """Ensure that a directory exists and return the resolved Path."""

    target = Path(path)
    target.mkdir(parents=True, exist_ok=True)
    return target.resolve()


def serialize_json(data: object, destination: Path | str, *, indent: int = 2) -> Path:
    """Serialize data to JSON with deterministic ordering."""

    dest_path = Path(destination)
    ensure_directory(dest_path.parent)
    dest_path.write_text(
        json.dumps(data, indent=indent, sort_keys=True, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    _LOGGER.debug("Serialized JSON", path=str(dest_path), size=dest_path.stat().st_size)
    return dest_path


def unique_preserving_order(items: Iterable[str]) -> List[str]:
    """Drop blank and repeated strings while keeping first occurrences."""

    return list(dict.fromkeys(item.strip() for item in items if item and item.strip()))


__all__ = ["ensure_directory", "serialize_json", "unique_preserving_order"]
