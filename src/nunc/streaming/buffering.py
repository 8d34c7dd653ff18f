"""Sliding window buffering for streaming changepoint detection."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Generic, Iterator, List, Tuple, TypeVar

T = TypeVar("T")


class ReadWriteLock:
    """Lock allowing many concurrent readers or a single writer.

    Writers take priority: once a writer is waiting, new readers queue behind
    it so a steady stream of reads cannot starve pushes.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class SlidingWindow(Generic[T]):
    """Fixed-capacity FIFO window that is safe to share between threads.

    Once the window reaches capacity every push overwrites the oldest element.
    The all-time push count is kept alongside the data so callers can map a
    window offset back to an absolute stream index.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("window capacity must be greater than 0")
        self._capacity = int(capacity)
        self._data: list[T | None] = [None] * self._capacity
        self._count = 0
        self._lock = ReadWriteLock()

    def push(self, value: T) -> int:
        """Add a value and return the total number of values ever pushed."""

        with self._lock.write_locked():
            self._push(value)
            return self._count

    def push_snapshot(self, value: T, require_full: bool = True) -> Tuple[int, List[T] | None]:
        """Push a value and read the window back under the same exclusive lock."""

        with self._lock.write_locked():
            self._push(value)
            return self._count, self._snapshot(require_full)

    def snapshot(self, require_full: bool = False) -> List[T] | None:
        """Return the contents oldest-first, or ``None`` when ``require_full`` and not full."""

        with self._lock.read_locked():
            return self._snapshot(require_full)

    def capacity(self) -> int:
        return self._capacity

    def count(self) -> int:
        """All-time number of pushes, not just those still in the window."""

        with self._lock.read_locked():
            return self._count

    def len(self) -> int:
        with self._lock.read_locked():
            return min(self._count, self._capacity)

    def __len__(self) -> int:
        return self.len()

    def is_full(self) -> bool:
        with self._lock.read_locked():
            return self._count >= self._capacity

    def _marker(self) -> int:
        # slot holding the oldest element (and the next write position)
        return self._count % self._capacity

    def _push(self, value: T) -> None:
        self._data[self._marker()] = value
        self._count += 1

    def _snapshot(self, require_full: bool) -> List[T] | None:
        if self._count < self._capacity:
            if require_full:
                return None
            return list(self._data[: self._count])  # type: ignore[arg-type]
        m = self._marker()
        return list(self._data[m:] + self._data[:m])  # type: ignore[arg-type]
