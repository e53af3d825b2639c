"""Tests for the knowledge API health check."""
from __future__ import annotations

import httpx

from graphview.utils.api_health import KnowledgeAPIHealth, check_api_health


def test_check_api_health_running() -> None:
    """A running API should yield a healthy result with backend states."""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/health"
        assert request.headers["X-User-ID"] == "admin"
        return httpx.Response(
            200,
            json={"api": "running", "vector_db": "connected", "graph_db": "local_fallback"},
        )

    client = httpx.Client(transport=httpx.MockTransport(handler))

    result = check_api_health("http://example.com/api/", user_id="admin", client=client)

    client.close()

    assert result == KnowledgeAPIHealth(
        ok=True,
        status_code=200,
        detail="Knowledge API is running",
        latency_ms=result.latency_ms,
        api_status="running",
        backends={"vector_db": "connected", "graph_db": "local_fallback"},
    )
    assert result.degraded_backends == ["graph_db"]


def test_check_api_health_not_running() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"api": "starting"})

    client = httpx.Client(transport=httpx.MockTransport(handler))

    result = check_api_health("http://example.com/api", client=client)

    client.close()

    assert not result.ok
    assert result.api_status == "starting"


def test_check_api_health_failure_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="service unavailable")

    client = httpx.Client(transport=httpx.MockTransport(handler))

    result = check_api_health("http://example.com/api", client=client)

    client.close()

    assert not result.ok
    assert result.status_code == 503
    assert "Health endpoint returned" in result.detail


def test_check_api_health_network_error() -> None:
    class ErrorTransport(httpx.BaseTransport):
        def handle_request(self, request: httpx.Request) -> httpx.Response:  # type: ignore[override]
            raise httpx.ConnectError("connection refused", request=request)

    client = httpx.Client(transport=ErrorTransport())

    result = check_api_health("http://example.com/api", client=client)

    client.close()

    assert not result.ok
    assert result.status_code is None
    assert "connection refused" in result.detail
