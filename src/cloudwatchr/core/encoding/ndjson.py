"""NDJSON encoders for stored metrics and log entries."""

import json
from collections.abc import Iterable
from typing import Any

from cloudwatchr.core.encoding.wire import encode_metric
from cloudwatchr.core.models import LogEntry, StoredMetric


def encode_ndjson(records: Iterable[dict[str, Any]]) -> str:
    """Encode JSON-ready dicts to newline-delimited JSON.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no records.
    """
    lines = [json.dumps(record) for record in records]
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def encode_metrics(metrics: Iterable[StoredMetric]) -> str:
    """Encode stored metrics to NDJSON using the wire field names."""
    return encode_ndjson(encode_metric(metric) for metric in metrics)


def encode_logs(entries: Iterable[LogEntry]) -> str:
    """Encode log entries to newline-delimited JSON.

    Args:
        entries: An iterable of LogEntry objects.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no entries.
    """
    return encode_ndjson(
        {
            "timestamp": entry.timestamp,
            "level": entry.level,
            "message": entry.message,
            "attributes": entry.attributes,
        }
        for entry in entries
    )
