"""BDD step definitions for metric intake features."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from pytest_bdd import given, parsers, then, when

from cloudwatchr.adapters.frameworks.fastapi import create_app
from cloudwatchr.config import Settings


@dataclass
class IntakeScenarioContext:
    """Shared state between steps in an intake scenario."""

    app: FastAPI | None = None
    response: httpx.Response | None = None
    listed: list[dict[str, Any]] = field(default_factory=list)


@pytest.fixture
def ctx() -> IntakeScenarioContext:
    """Fresh scenario context for each test."""
    return IntakeScenarioContext()


def run_async(coro: Any) -> Any:
    """Run a coroutine to completion from a sync step."""
    return asyncio.run(coro)


async def _request(
    app: FastAPI, method: str, path: str, **kwargs: Any
) -> httpx.Response:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        return await client.request(method, path, **kwargs)


def call(
    ctx: IntakeScenarioContext, method: str, path: str, **kwargs: Any
) -> httpx.Response:
    """Send a request to the scenario app and remember the response."""
    assert ctx.app is not None, "no service started"
    ctx.response = run_async(_request(ctx.app, method, path, **kwargs))
    return ctx.response


def metric_payload(
    service: str, latency: int = 150, status: int = 200
) -> dict[str, Any]:
    return {
        "serviceName": service,
        "endpoint": "/api/users/123",
        "timestamp": "2024-01-20T10:30:45.123Z",
        "latencyMs": latency,
        "statusCode": status,
    }


def _split(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",")]


# === Background Steps ===
@given("a metrics ingestion service")
def step_service(ctx: IntakeScenarioContext) -> None:
    ctx.app = create_app(Settings())


# === Submission Steps ===
_SUBMIT = (
    r'a metric (?:is|was) submitted for service "(?P<service>[^"]*)" '
    r"with latency (?P<latency>-?\d+) and status (?P<status>\d+)"
)
_SUBMIT_CONVERTERS = {"latency": int, "status": int}


@given(parsers.re(_SUBMIT), converters=_SUBMIT_CONVERTERS)
@when(parsers.re(_SUBMIT), converters=_SUBMIT_CONVERTERS)
def step_submit(
    ctx: IntakeScenarioContext, service: str, latency: int, status: int
) -> None:
    call(ctx, "POST", "/api/metrics", json=metric_payload(service, latency, status))


@given(parsers.parse("{n:d} metrics were submitted"))
def step_submit_n(ctx: IntakeScenarioContext, n: int) -> None:
    for _ in range(n):
        call(ctx, "POST", "/api/metrics", json=metric_payload("user-service"))


@given(parsers.parse('metrics were submitted for services "{services}"'))
def step_submit_services(ctx: IntakeScenarioContext, services: str) -> None:
    for service in _split(services):
        call(ctx, "POST", "/api/metrics", json=metric_payload(service))


@when(parsers.parse('a batch is submitted with statuses "{statuses}"'))
def step_submit_batch(ctx: IntakeScenarioContext, statuses: str) -> None:
    batch = [metric_payload("user-service", status=int(s)) for s in _split(statuses)]
    response = call(ctx, "POST", "/api/metrics/batch", json=batch)
    if response.status_code == 201:
        ctx.listed = response.json()["metrics"]


@when("all metrics are cleared")
def step_clear(ctx: IntakeScenarioContext) -> None:
    call(ctx, "DELETE", "/api/metrics")


@when(parsers.parse('metrics for service "{service}" are listed'))
def step_list_service(ctx: IntakeScenarioContext, service: str) -> None:
    ctx.listed = call(ctx, "GET", f"/api/metrics/service/{service}").json()["metrics"]


# === Assertion Steps ===
@then(parsers.parse("the response status is {code:d}"))
def step_status(ctx: IntakeScenarioContext, code: int) -> None:
    assert ctx.response is not None
    assert ctx.response.status_code == code, ctx.response.text


@then(parsers.parse("the assigned id is {metric_id:d}"))
def step_assigned_id(ctx: IntakeScenarioContext, metric_id: int) -> None:
    assert ctx.response is not None
    assert ctx.response.json()["metric"]["id"] == metric_id


@then("the validation errors are:")
def step_validation_errors(
    ctx: IntakeScenarioContext, datatable: list[list[str]]
) -> None:
    assert ctx.response is not None
    body = ctx.response.json()
    expected = {row[0]: row[1] for row in datatable[1:]}
    assert body["error"] == "Validation failed"
    assert body["validationErrors"] == expected


@then(parsers.parse("the stats report {total:d} ingested and {stored:d} stored"))
def step_stats(ctx: IntakeScenarioContext, total: int, stored: int) -> None:
    stats = call(ctx, "GET", "/api/metrics/stats").json()
    assert stats["totalIngested"] == total
    assert stats["currentlyStored"] == stored


@then(parsers.parse("the next metric gets id {metric_id:d}"))
def step_next_id(ctx: IntakeScenarioContext, metric_id: int) -> None:
    response = call(ctx, "POST", "/api/metrics", json=metric_payload("user-service"))
    assert response.json()["metric"]["id"] == metric_id


@then(parsers.parse('the listed ids are "{ids}"'))
def step_listed_ids(ctx: IntakeScenarioContext, ids: str) -> None:
    assert [m["id"] for m in ctx.listed] == [int(i) for i in _split(ids)]
