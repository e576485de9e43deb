"""Fixed-capacity best-of selector backed by a binary min-heap."""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, Generic, Iterator, TypeVar

T = TypeVar("T")


class BestOfSelector(Generic[T]):
    """Keeps the ``capacity`` highest-scoring items seen so far."""

    def __init__(self, capacity: int, key: Callable[[T], float]) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._key = key
        self._heap: list[tuple[float, int, T]] = []
        # tie-breaker so items themselves are never compared
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def __iter__(self) -> Iterator[T]:
        return (entry[2] for entry in self._heap)

    @property
    def capacity(self) -> int:
        return self._capacity

    def min_score(self) -> float | None:
        return self._heap[0][0] if self._heap else None

    def push(self, item: T) -> bool:
        """Insert ``item``; when full it replaces the current minimum only if better."""

        entry = (self._key(item), next(self._counter), item)
        if len(self._heap) < self._capacity:
            heapq.heappush(self._heap, entry)
            return True
        if entry[0] > self._heap[0][0]:
            heapq.heapreplace(self._heap, entry)
            return True
        return False

    def sorted_desc(self) -> list[T]:
        ordered = sorted(self._heap, key=lambda entry: (-entry[0], entry[1]))
        return [entry[2] for entry in ordered]
