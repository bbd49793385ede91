"""FastAPI adapter exposing metric intake over HTTP."""

import json
import logging
from typing import Any

from fastapi import APIRouter, FastAPI, Query, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from cloudwatchr.adapters.frameworks.query_params import parse_level, parse_since
from cloudwatchr.adapters.logging import install_log_storage
from cloudwatchr.adapters.storage.in_memory import InMemoryMetricStorage
from cloudwatchr.adapters.storage.ring_buffer import RingBufferLogStorage
from cloudwatchr.config import Settings
from cloudwatchr.core.encoding.ndjson import encode_logs, encode_metrics
from cloudwatchr.core.encoding.wire import decode_event, encode_metric
from cloudwatchr.core.errors import BatchValidationFailure, ValidationFailure
from cloudwatchr.core.models import IngestionStats, MetricEvent
from cloudwatchr.core.ports import LogStoragePort
from cloudwatchr.core.service import MetricIntake
from cloudwatchr.core.validation import FieldError, errors_to_dict, validate_event

logger = logging.getLogger(__name__)

NDJSON_MEDIA_TYPE = "application/x-ndjson"


def _encode_stats(stats: IngestionStats) -> dict[str, Any]:
    return {
        "totalIngested": stats.total_ingested,
        "currentlyStored": stats.currently_stored,
        "status": "operational",
    }


async def _read_json(request: Request) -> Any:
    """Parse the request body, turning malformed JSON into a validation failure."""
    body = await request.body()
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
        raise ValidationFailure({"body": "request body must be valid JSON"}) from None


def _decode_checked(
    intake: MetricIntake, payload: Any
) -> tuple[MetricEvent, dict[str, str]]:
    """Decode one event and collect decode and validation errors together.

    Decode errors come first so a type problem is reported instead of the
    ``must not be null`` it would otherwise cause.
    """
    event, decode_errors = decode_event(payload)
    if not decode_errors:
        return event, {}
    if not isinstance(payload, dict):
        return event, errors_to_dict(decode_errors)
    errors: list[FieldError] = decode_errors + validate_event(event, intake.policy)
    return event, errors_to_dict(errors)


def create_metrics_router(intake: MetricIntake) -> APIRouter:
    """Create a FastAPI router with the /api/metrics endpoints.

    Args:
        intake: The metric intake service the endpoints operate on.

    Returns:
        APIRouter with ingestion, query, stats, clear and export endpoints.
    """
    router = APIRouter(prefix="/api/metrics")

    @router.post("", status_code=201)
    async def ingest_metric(request: Request) -> dict[str, Any]:
        """Submit a single metric."""
        payload = await _read_json(request)
        event, errors = _decode_checked(intake, payload)
        logger.info(
            "Received metric submission: service=%s, endpoint=%s",
            event.service_name,
            event.endpoint,
        )
        if errors:
            raise ValidationFailure(errors)
        stored = await run_in_threadpool(intake.submit, event)
        return {
            "message": "Metric ingested successfully",
            "metric": encode_metric(stored),
        }

    @router.post("/batch", status_code=201)
    async def ingest_metrics_batch(request: Request) -> dict[str, Any]:
        """Submit several metrics; all are stored or none are."""
        payload = await _read_json(request)
        if not isinstance(payload, list):
            raise ValidationFailure({"body": "batch must be a JSON array"})
        logger.info("Received batch metric submission: %d metrics", len(payload))

        events: list[MetricEvent] = []
        item_errors: dict[int, dict[str, str]] = {}
        for index, item in enumerate(payload):
            event, errors = _decode_checked(intake, item)
            events.append(event)
            if errors:
                item_errors[index] = errors
        if item_errors:
            for index, event in enumerate(events):
                if index not in item_errors:
                    errors = errors_to_dict(validate_event(event, intake.policy))
                    if errors:
                        item_errors[index] = errors
            raise BatchValidationFailure(dict(sorted(item_errors.items())))

        stored = await run_in_threadpool(intake.submit_batch, events)
        return {
            "message": "Batch ingestion successful",
            "count": len(stored),
            "metrics": [encode_metric(m) for m in stored],
        }

    @router.get("")
    def get_all_metrics() -> dict[str, Any]:
        """Return every stored metric."""
        metrics = intake.list_all()
        return {"count": len(metrics), "metrics": [encode_metric(m) for m in metrics]}

    @router.get("/service/{service_name}")
    def get_metrics_by_service(service_name: str) -> dict[str, Any]:
        """Return stored metrics for one service (exact, case-sensitive)."""
        metrics = intake.list_by_service(service_name)
        return {
            "serviceName": service_name,
            "count": len(metrics),
            "metrics": [encode_metric(m) for m in metrics],
        }

    @router.get("/stats")
    def get_stats() -> dict[str, Any]:
        """Return ingestion statistics."""
        return _encode_stats(intake.stats())

    @router.delete("")
    def clear_metrics() -> dict[str, Any]:
        """Remove every stored metric. Counters are kept."""
        intake.clear_all()
        return {
            "message": "All metrics cleared",
            "stats": _encode_stats(intake.stats()),
        }

    @router.get("/export")
    def export_metrics() -> Response:
        """Return every stored metric as NDJSON."""
        return Response(
            content=encode_metrics(intake.list_all()),
            media_type=NDJSON_MEDIA_TYPE,
        )

    return router


def create_logs_router(log_storage: LogStoragePort) -> APIRouter:
    """Create a FastAPI router serving the service's own logs as NDJSON."""
    router = APIRouter()

    @router.get("/logs")
    def get_logs(
        since: str | None = Query(default=None),
        level: str | None = Query(default=None),
    ) -> Response:
        """Return logs in NDJSON format.

        Args:
            since: Unix timestamp. Returns entries with timestamp > since.
            level: Only return entries with this level.
        """
        entries = log_storage.read(since=parse_since(since), level=parse_level(level))
        return Response(content=encode_logs(entries), media_type=NDJSON_MEDIA_TYPE)

    return router


async def _validation_failure_handler(
    request: Request, exc: ValidationFailure
) -> JSONResponse:
    details: dict[str, Any]
    if isinstance(exc, BatchValidationFailure):
        details = {str(index): errs for index, errs in exc.item_errors.items()}
    else:
        details = exc.errors
    logger.debug(
        "Invalid submission to %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "validationErrors": details},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


def create_app(
    settings: Settings | None = None,
    intake: MetricIntake | None = None,
    log_storage: LogStoragePort | None = None,
) -> FastAPI:
    """Wire the metric intake service into a FastAPI application.

    Args:
        settings: Service configuration. Defaults to ``Settings()``.
        intake: Intake service to expose. A fresh one backed by
            InMemoryMetricStorage is built when omitted.
        log_storage: Destination for the service's own logs. A ring buffer
            sized by ``settings.log_buffer_size`` is built when omitted.

    Returns:
        Configured FastAPI application. The intake and log storage are
        available as ``app.state.intake`` and ``app.state.log_storage``.
    """
    settings = settings or Settings()
    if intake is None:
        intake = MetricIntake(InMemoryMetricStorage(), policy=settings.latency_policy)
    if log_storage is None:
        log_storage = RingBufferLogStorage(max_size=settings.log_buffer_size)
    install_log_storage(log_storage, level=settings.log_level)

    app = FastAPI(title="CloudWatchr Metrics Ingestion")
    app.state.settings = settings
    app.state.intake = intake
    app.state.log_storage = log_storage

    app.add_exception_handler(ValidationFailure, _validation_failure_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(create_metrics_router(intake))
    app.include_router(create_logs_router(log_storage))

    @app.get("/api/health")
    def health() -> dict[str, str]:
        """Report liveness and the service name."""
        return {"status": "UP", "service": settings.service_name}

    logger.info(
        "Metrics ingestion app created (latency policy=%s)",
        settings.latency_policy.value,
    )
    return app
