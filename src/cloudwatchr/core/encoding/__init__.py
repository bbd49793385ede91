"""Encoders between domain models and wire formats."""

from cloudwatchr.core.encoding.ndjson import encode_logs, encode_metrics, encode_ndjson
from cloudwatchr.core.encoding.wire import (
    decode_event,
    encode_metric,
    format_timestamp,
    parse_timestamp,
)

__all__ = [
    "decode_event",
    "encode_logs",
    "encode_metric",
    "encode_metrics",
    "encode_ndjson",
    "format_timestamp",
    "parse_timestamp",
]
