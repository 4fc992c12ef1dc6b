from __future__ import annotations

import asyncio

import httpx

from infragraph.adapters.http_resilience import (
    RateLimit,
    ResilienceConfig,
    ResilientClient,
    RetryPolicy,
    build_retry,
)


def test_build_retry_copies_policy() -> None:
    retry = build_retry(RetryPolicy(total=2, status_forcelist=frozenset({503})))

    assert retry.total == 2
    assert retry.is_retryable_status_code(503)
    assert not retry.is_retryable_status_code(500)


def test_default_policy_retries_transport_failures_only() -> None:
    assert RetryPolicy().retry_on_exceptions == (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )


def test_client_retries_transient_statuses() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        if len(calls) == 1:
            return httpx.Response(503)
        return httpx.Response(200, json={"ok": True})

    config = ResilienceConfig(
        name="test",
        base_url="https://example.test",
        retry=RetryPolicy(total=2, backoff_factor=0.0, backoff_jitter=0.0),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        default_headers={"X-Test": "1"},
    )

    async def run() -> httpx.Response:
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            return await client.get("/items")

    response = asyncio.run(run())

    assert response.status_code == 200
    assert calls == ["https://example.test/items", "https://example.test/items"]
    assert response.request.headers["X-Test"] == "1"


def test_client_runs_response_hooks() -> None:
    seen: list[int] = []

    async def hook(response: httpx.Response) -> None:
        seen.append(response.status_code)

    def handler(request: httpx.Request) -> httpx.Response:
        _ = request
        return httpx.Response(404)

    config = ResilienceConfig(name="test", retry=RetryPolicy(total=0))

    async def run() -> httpx.Response:
        client = ResilientClient(
            config, transport=httpx.MockTransport(handler), extra_hooks=(hook,)
        )
        try:
            return await client.post("https://example.test/token", data={"a": "b"})
        finally:
            await client.aclose()

    response = asyncio.run(run())

    assert response.status_code == 404
    assert seen == [404]
