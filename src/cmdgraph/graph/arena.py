"""Append-only storage addressed by integer handles."""

from __future__ import annotations

from typing import Generic, Iterator, List, TypeVar

from .errors import InvalidHandle

T = TypeVar("T")


class Arena(Generic[T]):
    """Grow-only list of records.

    Handles are positions in the backing list. Nothing is ever removed, so a
    handle keeps addressing the same record for the lifetime of the arena.
    """

    def __init__(self, kind: str = "node") -> None:
        self._kind = kind
        self._items: List[T] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __getitem__(self, handle: int) -> T:
        return self._items[self.check(handle)]

    def push(self, item: T) -> int:
        """Append ``item`` and return its handle."""

        handle = len(self._items)
        self._items.append(item)
        return handle

    def contains(self, handle: int) -> bool:
        return 0 <= handle < len(self._items)

    def check(self, handle: int) -> int:
        """Return ``handle`` unchanged or raise :class:`InvalidHandle`."""

        if not self.contains(handle):
            raise InvalidHandle(handle, len(self._items), kind=self._kind)
        return handle


__all__ = ["Arena"]
