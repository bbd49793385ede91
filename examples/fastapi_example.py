"""Example FastAPI application embedding the metric intake service.

Run with:
    uvicorn examples.fastapi_example:app --reload

Endpoints:
    /api/metrics                    - POST one metric, GET all, DELETE to clear
    /api/metrics/batch              - POST an array of metrics (all or none)
    /api/metrics/service/<name>     - metrics for one service
    /api/metrics/stats              - ingestion counters
    /api/metrics/export             - NDJSON dump of stored metrics
    /logs?level=<level>             - the service's own logs as NDJSON

This example accepts zero-latency metrics (cache hits measured at
millisecond granularity often report 0) and seeds one metric at startup.
"""

from datetime import UTC, datetime

from cloudwatchr.adapters.frameworks.fastapi import create_app
from cloudwatchr.adapters.storage.in_memory import InMemoryMetricStorage
from cloudwatchr.config import Settings
from cloudwatchr.core.models import MetricEvent
from cloudwatchr.core.service import MetricIntake
from cloudwatchr.core.validation import LatencyPolicy

settings = Settings(latency_policy=LatencyPolicy.NON_NEGATIVE, log_level="DEBUG")

intake = MetricIntake(InMemoryMetricStorage(), policy=settings.latency_policy)
intake.submit(
    MetricEvent(
        service_name="example-cache",
        endpoint="/cache/hit",
        timestamp=datetime.now(UTC),
        latency_ms=0,
        status_code=200,
        method="GET",
    )
)

app = create_app(settings, intake=intake)
