"""JSON codec between the camelCase wire format and the domain models."""

from datetime import UTC, datetime
from typing import Any

from cloudwatchr.core.models import MetricEvent, StoredMetric
from cloudwatchr.core.validation import FieldError

# Wire name -> MetricEvent attribute
_TEXT_FIELDS = {
    "serviceName": "service_name",
    "endpoint": "endpoint",
    "requestId": "request_id",
    "region": "region",
    "method": "method",
}
_INT_FIELDS = {
    "latencyMs": "latency_ms",
    "statusCode": "status_code",
}


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO-8601 instant into an aware UTC datetime.

    A trailing ``Z`` is accepted. Naive values are taken to be UTC.

    Raises:
        ValueError: If ``raw`` is not an ISO-8601 date-time, or its offset
            moves it outside the representable UTC range.
    """
    value = datetime.fromisoformat(raw.strip())
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    try:
        return value.astimezone(UTC)
    except OverflowError:
        raise ValueError(f"{raw!r} is out of range in UTC") from None


def format_timestamp(value: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with millisecond precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    utc = value.astimezone(UTC)
    # strftime("%Y") does not zero-pad years below 1000 on every platform
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}"
        f"T{utc:%H:%M:%S}.{utc.microsecond // 1000:03d}Z"
    )


def _decode_int(name: str, raw: Any, errors: list[FieldError]) -> int | None:
    if raw is None:
        return None
    # bool is an int subclass but never a valid count here
    if isinstance(raw, bool):
        errors.append(FieldError(name, f"{name} must be an integer"))
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    errors.append(FieldError(name, f"{name} must be an integer"))
    return None


def decode_event(payload: Any) -> tuple[MetricEvent, list[FieldError]]:
    """Decode a JSON object into a MetricEvent.

    Type problems are reported as field errors rather than raised, so they
    can be merged with the results of ``validate_event``. Unknown keys are
    ignored.

    Args:
        payload: The parsed JSON value for one event.

    Returns:
        Tuple of (event, decode errors). Fields that failed to decode are
        left as None on the event.
    """
    if not isinstance(payload, dict):
        return MetricEvent(), [FieldError("body", "metric must be a JSON object")]

    errors: list[FieldError] = []
    values: dict[str, Any] = {}

    for wire_name, attr in _TEXT_FIELDS.items():
        raw = payload.get(wire_name)
        if raw is None or isinstance(raw, str):
            values[attr] = raw
        else:
            errors.append(FieldError(wire_name, f"{wire_name} must be a string"))

    for wire_name, attr in _INT_FIELDS.items():
        values[attr] = _decode_int(wire_name, payload.get(wire_name), errors)

    raw_ts = payload.get("timestamp")
    values["timestamp"] = None
    if isinstance(raw_ts, str):
        try:
            values["timestamp"] = parse_timestamp(raw_ts)
        except ValueError:
            errors.append(
                FieldError("timestamp", "timestamp must be an ISO-8601 instant")
            )
    elif raw_ts is not None:
        errors.append(FieldError("timestamp", "timestamp must be an ISO-8601 instant"))

    return MetricEvent(**values), errors


def encode_metric(metric: StoredMetric) -> dict[str, Any]:
    """Encode a stored metric as a JSON-ready dict.

    Absent optional fields are included as None.
    """
    return {
        "id": metric.id,
        "serviceName": metric.service_name,
        "endpoint": metric.endpoint,
        "timestamp": format_timestamp(metric.timestamp),
        "latencyMs": metric.latency_ms,
        "statusCode": metric.status_code,
        "requestId": metric.request_id,
        "region": metric.region,
        "method": metric.method,
    }
