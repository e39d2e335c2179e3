"""A fixed pool of shared objects handed out by least use."""

from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


def _reference_counts(objects: list) -> list[int]:
    return [sys.getrefcount(obj) for obj in objects]


def _baseline() -> int:
    (count,) = _reference_counts([object()])
    return count


class ObjectPool(Generic[T]):
    """Objects built in parallel; `get` returns the one with the fewest holders."""

    def __init__(self, num_objects: int, init_fn: Callable[[], T]) -> None:
        if num_objects <= 0:
            self.objects: list[T] = []
            return
        with ThreadPoolExecutor(max_workers=num_objects) as pool:
            futures = [pool.submit(init_fn) for _ in range(num_objects)]
            self.objects = [future.result() for future in futures]

    def _strong_counts(self) -> list[int]:
        base = _baseline()
        return [count - base + 1 for count in _reference_counts(self.objects)]

    def get(self) -> T:
        if not self.objects:
            raise IndexError("object pool is empty")
        counts = self._strong_counts()
        return self.objects[counts.index(min(counts))]

    def __len__(self) -> int:
        return len(self.objects)

    def __repr__(self) -> str:
        counts = self._strong_counts()
        text = f"ObjectPool(len={len(self.objects)}, max_ref={max(counts, default=0)}, min_ref={min(counts, default=0)}"
        if len(self.objects) < 32:
            text += f", ref_counts={counts}"
        return text + ")"