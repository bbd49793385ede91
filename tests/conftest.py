"""Shared test fixtures for all test modules."""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime
from typing import Any

import httpx
import pytest
from fastapi import FastAPI

from cloudwatchr.adapters.frameworks.fastapi import create_app
from cloudwatchr.adapters.storage.in_memory import InMemoryMetricStorage
from cloudwatchr.adapters.storage.ring_buffer import RingBufferLogStorage
from cloudwatchr.config import Settings
from cloudwatchr.core.models import MetricEvent
from cloudwatchr.core.service import MetricIntake
from cloudwatchr.core.validation import LatencyPolicy

EXAMPLE_TIMESTAMP = datetime(2024, 1, 20, 10, 30, 45, 123000, tzinfo=UTC)


@pytest.fixture
def make_event() -> Callable[..., MetricEvent]:
    """Factory fixture for valid MetricEvent objects with overridable fields.

    Usage:
        def test_something(make_event):
            event = make_event(service_name="billing", latency_ms=0)
    """

    def _event(**overrides: Any) -> MetricEvent:
        fields: dict[str, Any] = {
            "service_name": "user-service",
            "endpoint": "/api/users/123",
            "timestamp": EXAMPLE_TIMESTAMP,
            "latency_ms": 150,
            "status_code": 200,
        }
        fields.update(overrides)
        return MetricEvent(**fields)

    return _event


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Factory fixture for valid JSON request bodies with overridable fields.

    Passing a field with value ``...`` removes it from the payload.
    """

    def _payload(**overrides: Any) -> dict[str, Any]:
        body: dict[str, Any] = {
            "serviceName": "user-service",
            "endpoint": "/api/users/123",
            "timestamp": "2024-01-20T10:30:45.123Z",
            "latencyMs": 150,
            "statusCode": 200,
        }
        body.update(overrides)
        return {k: v for k, v in body.items() if v is not ...}

    return _payload


# === Storage and Service Fixtures ===


@pytest.fixture
def metric_storage() -> InMemoryMetricStorage:
    """Fixture providing an empty metric storage."""
    return InMemoryMetricStorage()


@pytest.fixture
def log_storage() -> RingBufferLogStorage:
    """Fixture providing an empty log storage."""
    return RingBufferLogStorage(max_size=100)


@pytest.fixture
def intake(metric_storage: InMemoryMetricStorage) -> MetricIntake:
    """Fixture providing a fresh intake service with the default policy."""
    return MetricIntake(metric_storage)


@pytest.fixture
def lenient_intake() -> MetricIntake:
    """Fixture providing an intake service that accepts zero latency."""
    return MetricIntake(InMemoryMetricStorage(), policy=LatencyPolicy.NON_NEGATIVE)


# === HTTP Fixtures ===


@pytest.fixture
def settings() -> Settings:
    """Default settings with DEBUG logging so every log line is captured."""
    return Settings(log_level="DEBUG")


@pytest.fixture
def app(
    settings: Settings,
    intake: MetricIntake,
    log_storage: RingBufferLogStorage,
) -> FastAPI:
    """Fixture providing an app wired to the per-test intake and log storage."""
    return create_app(settings, intake=intake, log_storage=log_storage)


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Returns a callable that accepts an ASGI app and returns a client
    with ASGITransport configured.

    Usage:
        async def test_something(asgi_test_client, app):
            async with asgi_test_client(app) as client:
                response = await client.get("/api/metrics")
    """

    def _get_client(app, raise_app_exceptions: bool = True):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(
                app=app, raise_app_exceptions=raise_app_exceptions
            ),
            base_url="http://test",
        )

    return _get_client


@pytest.fixture
async def client(app: FastAPI, asgi_test_client) -> AsyncGenerator[httpx.AsyncClient]:
    """Fixture providing a ready client for the per-test app."""
    async with asgi_test_client(app) as c:
        yield c
