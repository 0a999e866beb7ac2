"""
CircularBuffer for recent altitude history with O(1) access and insertion.
HistoryWindow wraps it with the fixed display capacity and exposes the
index-aligned altitude / elapsed-time series the chart is drawn from.
"""
from typing import Generic, List, Optional, Tuple, TypeVar

from core.models.samples import AltitudeSample

T = TypeVar("T")

HISTORY_CAPACITY = 20


class CircularBuffer(Generic[T]):
    """
    Fixed-capacity ring of items.
    - O(1) insertion at the end
    - O(1) random access
    - Overwrites oldest when full
    """

    __slots__ = ('capacity', 'buffer', 'write_index', 'count')

    def __init__(self, capacity: int):
        """
        Initialize circular buffer.

        Args:
            capacity: Maximum number of items to store
        """
        if capacity <= 0:
            raise ValueError(f"Capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.buffer: List[Optional[T]] = [None] * capacity
        self.write_index = 0  # Next position to write
        self.count = 0  # Number of valid entries (0 to capacity)

    def append(self, item: T) -> None:
        """Add an item to the buffer, evicting the oldest one when full. O(1)."""
        self.buffer[self.write_index] = item
        self.write_index = (self.write_index + 1) % self.capacity
        if self.count < self.capacity:
            self.count += 1

    def get(self, index: int) -> T:
        """
        Get item at logical index (0 = oldest, count-1 = newest).
        O(1) access.
        """
        if index < 0 or index >= self.count:
            raise IndexError(f"Index {index} out of range [0, {self.count})")
        physical_index = (self.write_index - self.count + index) % self.capacity
        return self.buffer[physical_index]  # type: ignore[return-value]

    def get_all(self) -> List[T]:
        """Get all valid entries in insertion order."""
        if self.count == 0:
            return []
        start = (self.write_index - self.count) % self.capacity
        if start + self.count <= self.capacity:
            # Contiguous
            return list(self.buffer[start:start + self.count])  # type: ignore[arg-type]
        # Wrapped: tail of the array, then the head up to write_index
        return list(self.buffer[start:]) + list(self.buffer[:self.write_index])  # type: ignore[arg-type]

    def latest(self) -> Optional[T]:
        if self.count == 0:
            return None
        return self.get(self.count - 1)

    def is_full(self) -> bool:
        """Check if buffer is at capacity."""
        return self.count == self.capacity

    def size(self) -> int:
        """Get number of valid entries."""
        return self.count


class HistoryWindow:
    """
    Sliding window over the most recent AltitudeSample entries.

    Single writer (the telemetry pipeline) appends; any number of readers
    take snapshots. Capacity is fixed at HISTORY_CAPACITY and the oldest
    sample is always the one evicted.
    """

    __slots__ = ('_samples',)

    def __init__(self):
        self._samples: CircularBuffer[AltitudeSample] = CircularBuffer(HISTORY_CAPACITY)

    @property
    def capacity(self) -> int:
        return self._samples.capacity

    def append(self, sample: AltitudeSample) -> None:
        self._samples.append(sample)

    def snapshot(self) -> Tuple[AltitudeSample, ...]:
        """Read-only ordered view, oldest first."""
        return tuple(self._samples.get_all())

    def series(self) -> Tuple[List[float], List[int]]:
        """Return the (altitudes, elapsed_seconds) series, index-aligned."""
        samples = self._samples.get_all()
        return [s.altitude_m for s in samples], [s.elapsed_seconds for s in samples]

    def latest(self) -> Optional[AltitudeSample]:
        return self._samples.latest()

    def __len__(self) -> int:
        return self._samples.size()
