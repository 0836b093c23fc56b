"""Append-only time-ordered sample buffer backing a single chart track.

Samples are stored in a deque so that dropping stale points from the head
costs O(evicted) rather than a rescan of the whole buffer.
"""
import math
from collections import deque
from typing import Iterator, List, NamedTuple, Optional


class Sample(NamedTuple):
    timestamp: float
    value: float


def is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class TimeSeries:
    def __init__(self, name: Optional[str] = None):
        self.name = name
        self._dq = deque()

    def append(self, timestamp: float, value) -> bool:
        """Push a sample at the tail. Returns False when the sample is dropped.

        Non-finite or non-numeric values are dropped, as are timestamps older
        than the current tail, so the buffer always stays sorted.
        """
        if not is_finite_number(value):
            return False
        if self._dq and timestamp < self._dq[-1].timestamp:
            return False
        self._dq.append(Sample(timestamp, float(value)))
        return True

    def evict_older_than(self, cutoff: float) -> int:
        evicted = 0
        while self._dq and self._dq[0].timestamp < cutoff:
            self._dq.popleft()
            evicted += 1
        return evicted

    def clear(self) -> None:
        self._dq.clear()

    @property
    def last(self) -> Optional[Sample]:
        return self._dq[-1] if self._dq else None

    def timestamps(self) -> List[float]:
        return [s.timestamp for s in self._dq]

    def to_points(self) -> List[List[float]]:
        """Render as [[epoch_ms, value], ...] for chart libraries."""
        return [[int(s.timestamp * 1000), s.value] for s in self._dq]

    def __len__(self) -> int:
        return len(self._dq)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._dq)

    def __repr__(self) -> str:
        return f"TimeSeries(name={self.name!r}, size={len(self._dq)})"
