"""HTTP client for the knowledge API resources consumed by the graph view."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from graphview.config import APIConfig
from graphview.contracts import DocumentList, GraphData, KnowledgeStats, SeedResult
from graphview.exceptions import SeedFailure, TransientFetchFailure

LOGGER = logging.getLogger(__name__)

GRAPH_PATH = "/graph/data"
STATS_PATH = "/knowledge/stats"
DOCUMENTS_PATH = "/documents"
SEED_PATH = "/knowledge/seed"

ModelT = TypeVar("ModelT", bound=BaseModel)


class KnowledgeAPIClient:
    """Async wrapper around the graph, stats, documents and seed endpoints."""

    def __init__(self, config: APIConfig, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.timeout_seconds)

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "X-User-ID": self._config.user_id}

    def _url(self, path: str) -> str:
        return f"{self._config.base_url}{path}"

    async def fetch_graph(self) -> GraphData:
        return await self._get("graph", GRAPH_PATH, GraphData)

    async def fetch_stats(self) -> KnowledgeStats:
        return await self._get("stats", STATS_PATH, KnowledgeStats)

    async def fetch_documents(self) -> DocumentList:
        return await self._get("documents", DOCUMENTS_PATH, DocumentList)

    async def seed(self) -> SeedResult:
        """Ask the server to populate sample data.

        Raises:
            SeedFailure: If the request fails or the server rejects it.
        """

        url = self._url(SEED_PATH)
        try:
            response = await self._client.post(url, headers=self.headers)
        except httpx.HTTPError as exc:
            LOGGER.error("Seed request raised an error", extra={"url": url, "error": str(exc)})
            raise SeedFailure(str(exc)) from exc
        if response.is_error:
            LOGGER.error(
                "Seed request failed with status",
                extra={"url": url, "status_code": response.status_code, "response_text": response.text},
            )
            raise SeedFailure(f"server returned {response.status_code}", status_code=response.status_code)
        try:
            payload = response.json()
        except ValueError:
            LOGGER.warning("Seed endpoint returned non-JSON payload", extra={"url": url})
            return SeedResult()
        if not isinstance(payload, dict):
            return SeedResult()
        try:
            return SeedResult(**payload)
        except ValidationError:
            LOGGER.warning("Seed endpoint returned an unexpected payload", extra={"url": url})
            return SeedResult()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, resource: str, path: str, model: Type[ModelT]) -> ModelT:
        url = self._url(path)
        start_time = time.monotonic()
        try:
            response = await self._client.get(url, headers=self.headers)
        except httpx.HTTPError as exc:
            LOGGER.warning(
                "Knowledge API request raised an error",
                extra={"url": url, "resource": resource, "error": str(exc)},
            )
            raise TransientFetchFailure(resource, str(exc)) from exc
        latency_ms = (time.monotonic() - start_time) * 1000
        if response.is_error:
            LOGGER.warning(
                "Knowledge API request failed with status",
                extra={"url": url, "resource": resource, "status_code": response.status_code, "latency_ms": latency_ms},
            )
            raise TransientFetchFailure(
                resource, f"server returned {response.status_code}", status_code=response.status_code
            )
        payload = self._decode(resource, response)
        try:
            return model(**payload)
        except ValidationError as exc:
            LOGGER.warning("Knowledge API payload failed validation", extra={"url": url, "resource": resource})
            raise TransientFetchFailure(resource, "invalid payload") from exc

    @staticmethod
    def _decode(resource: str, response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransientFetchFailure(resource, "response was not JSON") from exc
        if not isinstance(payload, dict):
            raise TransientFetchFailure(resource, "response root was not an object")
        return payload


__all__ = ["DOCUMENTS_PATH", "GRAPH_PATH", "KnowledgeAPIClient", "SEED_PATH", "STATS_PATH"]
