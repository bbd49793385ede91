"""Port interfaces for storage adapters.

These protocols define the contracts that storage adapters must implement.
The core domain depends only on these interfaces, not concrete implementations.
"""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from cloudwatchr.core.models import LogEntry, StoredMetric


@runtime_checkable
class MetricStoragePort(Protocol):
    """Port for stored metric operations.

    Adapters implementing this protocol own every metric written to them.
    Examples: InMemoryMetricStorage.
    """

    def insert(self, metric: StoredMetric) -> None:
        """Store a single metric under its identifier."""
        ...

    def insert_many(self, metrics: Iterable[StoredMetric]) -> None:
        """Store several metrics so readers see all of them or none."""
        ...

    def values(self) -> list[StoredMetric]:
        """Return a snapshot of every stored metric in insertion order."""
        ...

    def size(self) -> int:
        """Return the number of stored metrics."""
        ...

    def clear(self) -> None:
        """Remove every stored metric."""
        ...


@runtime_checkable
class LogStoragePort(Protocol):
    """Port for log storage operations.

    Adapters implementing this protocol can store and retrieve log entries.
    Examples: RingBufferLogStorage.
    """

    def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        ...

    def read(self, since: float = 0, level: str | None = None) -> list[LogEntry]:
        """Read log entries since the given timestamp.

        Args:
            since: Unix timestamp. Returns entries with timestamp > since.
                   Default 0 returns all entries.
            level: Optional log level filter (exact, upper case).

        Returns:
            List of LogEntry objects, ordered by timestamp ascending.
        """
        ...
