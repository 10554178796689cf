"""Fixed size FIFO buffer used to remember recent announcements."""

from __future__ import annotations

from collections import deque
from typing import Generic, Hashable, Iterator, TypeVar

T = TypeVar("T", bound=Hashable)

DEFAULT_HISTORY_SIZE = 10


class DedupBuffer(Generic[T]):
    """Keeps the ``capacity`` most recently inserted values, oldest first.

    Membership is a linear scan; the buffer is meant to stay small.
    """

    __slots__ = ("_capacity", "_items")

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be a positive integer")
        self._capacity = capacity
        self._items: deque[T] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    def insert(self, value: T) -> T | None:
        """Append ``value``, returning the evicted oldest value when full."""
        evicted = None
        if len(self._items) == self._capacity:
            evicted = self._items.popleft()
        self._items.append(value)
        return evicted

    def contains(self, value: T) -> bool:
        return value in self._items

    def copy(self) -> "DedupBuffer[T]":
        clone: DedupBuffer[T] = DedupBuffer(self._capacity)
        clone._items.extend(self._items)
        return clone

    def __contains__(self, value: object) -> bool:
        return value in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"DedupBuffer(capacity={self._capacity}, items={list(self._items)!r})"


__all__ = ["DEFAULT_HISTORY_SIZE", "DedupBuffer"]
