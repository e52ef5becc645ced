from __future__ import annotations

from typing import Iterator, Tuple

import numpy as np

from .models import Sample

DEFAULT_WINDOW_SIZE = 50


class SampleWindow:
    """
    Fixed-size FIFO of the most recent samples.

    Backed by a circular list: pushing into a full window overwrites the
    oldest slot, so appends stay O(1) and the logical order is always
    arrival order.
    """

    def __init__(self, capacity: int = DEFAULT_WINDOW_SIZE) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = int(capacity)
        self._slots: list[Sample | None] = [None] * self._capacity
        self._start = 0
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_full(self) -> bool:
        return self._size == self._capacity

    def push(self, sample: Sample) -> Tuple[Sample, ...]:
        """Append ``sample``, evicting the oldest entry when at capacity."""
        idx = (self._start + self._size) % self._capacity
        self._slots[idx] = sample
        if self._size < self._capacity:
            self._size += 1
        else:
            self._start = (self._start + 1) % self._capacity
        return self.snapshot()

    def reset(self) -> None:
        self._slots = [None] * self._capacity
        self._start = 0
        self._size = 0

    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Sample]:
        for i in range(self._size):
            item = self._slots[(self._start + i) % self._capacity]
            assert item is not None
            yield item

    def snapshot(self) -> Tuple[Sample, ...]:
        """Return the logical contents, oldest first."""
        return tuple(self)

    def magnitudes(self) -> np.ndarray:
        """Return the ``total`` of every buffered sample in arrival order."""
        return np.fromiter((s.total for s in self), dtype=np.float64, count=self._size)
