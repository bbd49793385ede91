"""Storage adapters implementing core ports."""

from cloudwatchr.adapters.storage.in_memory import InMemoryMetricStorage
from cloudwatchr.adapters.storage.ring_buffer import RingBufferLogStorage

__all__ = [
    "InMemoryMetricStorage",
    "RingBufferLogStorage",
]
