"""cloudwatchr - metric intake service for the CloudWatchr monitoring platform."""

from cloudwatchr.adapters.logging import LogStorageHandler
from cloudwatchr.adapters.storage import InMemoryMetricStorage, RingBufferLogStorage
from cloudwatchr.config import Settings
from cloudwatchr.core.errors import BatchValidationFailure, ValidationFailure
from cloudwatchr.core.models import IngestionStats, LogEntry, MetricEvent, StoredMetric
from cloudwatchr.core.service import MetricIntake
from cloudwatchr.core.validation import FieldError, LatencyPolicy, validate_event

__all__ = [
    "BatchValidationFailure",
    "FieldError",
    "InMemoryMetricStorage",
    "IngestionStats",
    "LatencyPolicy",
    "LogEntry",
    "LogStorageHandler",
    "MetricEvent",
    "MetricIntake",
    "RingBufferLogStorage",
    "Settings",
    "StoredMetric",
    "ValidationFailure",
    "validate_event",
]
