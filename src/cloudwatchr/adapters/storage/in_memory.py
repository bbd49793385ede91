"""In-memory storage adapter for stored metrics."""

import threading
from collections.abc import Iterable

from cloudwatchr.core.models import StoredMetric


class InMemoryMetricStorage:
    """In-memory implementation of MetricStoragePort.

    Stores metrics in a dict keyed by identifier. Dict ordering gives
    insertion order on read. All access goes through a lock so readers never
    observe half of a batch.
    """

    def __init__(self) -> None:
        self._metrics: dict[int, StoredMetric] = {}
        self._lock = threading.Lock()

    def insert(self, metric: StoredMetric) -> None:
        """Store a single metric under its identifier."""
        with self._lock:
            self._metrics[metric.id] = metric

    def insert_many(self, metrics: Iterable[StoredMetric]) -> None:
        """Store several metrics in one critical section."""
        with self._lock:
            for metric in metrics:
                self._metrics[metric.id] = metric

    def values(self) -> list[StoredMetric]:
        """Return a snapshot of every stored metric in insertion order."""
        with self._lock:
            return list(self._metrics.values())

    def size(self) -> int:
        """Return the number of stored metrics."""
        with self._lock:
            return len(self._metrics)

    def clear(self) -> None:
        """Remove every stored metric."""
        with self._lock:
            self._metrics.clear()
