"""Probe the knowledge API health endpoint before starting the graph view."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

HEALTH_PATH = "/health"
RUNNING = "running"
CONNECTED = "connected"
BACKEND_KEYS = ("vector_db", "graph_db")


@dataclass(frozen=True)
class KnowledgeAPIHealth:
    """Outcome of a knowledge API health check."""

    ok: bool
    status_code: Optional[int]
    detail: str
    latency_ms: Optional[float]
    api_status: Optional[str] = None
    backends: Dict[str, str] = field(default_factory=dict)

    @property
    def degraded_backends(self) -> List[str]:
        """Backends reporting anything other than ``connected``."""

        return sorted(name for name, state in self.backends.items() if state != CONNECTED)


def check_api_health(
    base_url: str,
    *,
    user_id: Optional[str] = None,
    timeout: float = 5.0,
    client: Optional[httpx.Client] = None,
) -> KnowledgeAPIHealth:
    """Call ``GET {base_url}/health`` and summarise the reported state.

    The API counts as healthy when it answers 200 with ``api: "running"``.
    Storage backends that fall back or disconnect are reported but do not
    fail the check.

    Args:
        base_url: Knowledge API base URL, e.g. ``"http://localhost:8080/api"``.
        user_id: Optional value for the ``X-User-ID`` header.
        timeout: Request timeout in seconds when creating an internal client.
        client: Optional pre-configured ``httpx.Client`` (useful for testing).

    Returns:
        KnowledgeAPIHealth: Structured health check result.
    """

    url = f"{base_url.rstrip('/')}{HEALTH_PATH}"
    headers = {"X-User-ID": user_id} if user_id else {}
    should_close = client is None
    session = client or httpx.Client(timeout=timeout)
    start_time = time.monotonic()

    try:
        response = session.get(url, headers=headers)
    except httpx.HTTPError as exc:
        latency_ms = (time.monotonic() - start_time) * 1000
        logger.error(
            "Knowledge API health request raised an error",
            extra={"url": url, "latency_ms": latency_ms, "error": str(exc)},
        )
        return KnowledgeAPIHealth(
            ok=False,
            status_code=None,
            detail=f"Request to {url} failed: {exc}",
            latency_ms=latency_ms,
        )
    finally:
        if should_close:
            session.close()

    latency_ms = (time.monotonic() - start_time) * 1000
    if response.status_code != httpx.codes.OK:
        logger.warning(
            "Knowledge API health check failed with status",
            extra={"url": url, "status_code": response.status_code, "response_text": response.text},
        )
        return KnowledgeAPIHealth(
            ok=False,
            status_code=response.status_code,
            detail=f"Health endpoint returned {response.status_code}",
            latency_ms=latency_ms,
        )

    payload = _json_object(response, url)
    api_status = payload.get("api")
    backends = {key: str(payload[key]) for key in BACKEND_KEYS if payload.get(key) is not None}
    if api_status != RUNNING:
        logger.warning("Knowledge API did not report running", extra={"url": url, "api_status": api_status})
        return KnowledgeAPIHealth(
            ok=False,
            status_code=response.status_code,
            detail=f"API reported status {api_status!r}",
            latency_ms=latency_ms,
            api_status=None if api_status is None else str(api_status),
            backends=backends,
        )

    logger.info(
        "Knowledge API health check succeeded",
        extra={"url": url, "latency_ms": latency_ms, "backends": backends},
    )
    return KnowledgeAPIHealth(
        ok=True,
        status_code=response.status_code,
        detail="Knowledge API is running",
        latency_ms=latency_ms,
        api_status=RUNNING,
        backends=backends,
    )


def _json_object(response: httpx.Response, url: str) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        logger.warning("Health endpoint returned non-JSON payload", extra={"url": url})
        return {}
    return payload if isinstance(payload, dict) else {}


__all__ = ["KnowledgeAPIHealth", "check_api_health"]
