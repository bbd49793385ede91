"""Core domain models for metric intake."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class MetricEvent:
    """A candidate metric event describing one observed API request.

    Every field may be None so that an incomplete submission can still be
    represented and validated field by field.

    Attributes:
        service_name: Name of the emitting service.
        endpoint: API path observed.
        timestamp: When the request happened (UTC aware datetime).
        latency_ms: Request latency in milliseconds.
        status_code: HTTP status code returned.
        request_id: Optional correlation identifier.
        region: Optional deployment region.
        method: Optional HTTP method.
    """

    service_name: str | None = None
    endpoint: str | None = None
    timestamp: datetime | None = None
    latency_ms: int | None = None
    status_code: int | None = None
    request_id: str | None = None
    region: str | None = None
    method: str | None = None


@dataclass(frozen=True)
class StoredMetric:
    """A validated metric event plus the identifier assigned on intake."""

    id: int
    service_name: str
    endpoint: str
    timestamp: datetime
    latency_ms: int
    status_code: int
    request_id: str | None = None
    region: str | None = None
    method: str | None = None

    @classmethod
    def from_event(cls, metric_id: int, event: MetricEvent) -> "StoredMetric":
        """Build a stored metric from an already validated event."""
        return cls(
            id=metric_id,
            service_name=event.service_name,  # type: ignore[arg-type]
            endpoint=event.endpoint,  # type: ignore[arg-type]
            timestamp=event.timestamp,  # type: ignore[arg-type]
            latency_ms=event.latency_ms,  # type: ignore[arg-type]
            status_code=event.status_code,  # type: ignore[arg-type]
            request_id=event.request_id,
            region=event.region,
            method=event.method,
        )


@dataclass(frozen=True)
class IngestionStats:
    """Counters describing intake activity.

    Attributes:
        total_ingested: Metrics accepted since start. Never decreases.
        currently_stored: Metrics held in storage right now.
    """

    total_ingested: int
    currently_stored: int


@dataclass(frozen=True)
class LogEntry:
    """A structured log entry.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Log level (e.g., INFO, ERROR, DEBUG).
        message: The log message.
        attributes: Additional structured fields.
    """

    timestamp: float
    level: str
    message: str
    attributes: dict[str, str | int | float | bool] = field(default_factory=dict)
