"""Tests for the knowledge API HTTP client."""

from __future__ import annotations

import asyncio
from typing import List

import httpx
import pytest

from graphview.config import APIConfig
from graphview.exceptions import SeedFailure, TransientFetchFailure
from graphview.fetcher import KnowledgeAPIClient

API = APIConfig(base_url="http://knowledge.test/api/", user_id="admin")


def _client(handler) -> tuple[KnowledgeAPIClient, httpx.AsyncClient]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return KnowledgeAPIClient(API, client=http_client), http_client


def test_fetch_graph_parses_entities_and_sends_user_header() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "entities": [
                    {"id": "doc-1", "label": "Document", "properties": {"name": "Intro", "pages": 3}},
                    {"id": "tech-1", "label": "Technology", "properties": {}},
                ],
                "relationships": [{"from_id": "doc-1", "to_id": "tech-1", "rel_type": "MENTIONS"}],
            },
        )

    async def _run() -> None:
        client, http_client = _client(handler)
        graph = await client.fetch_graph()
        await http_client.aclose()

        assert graph.entity_ids == ["doc-1", "tech-1"]
        assert graph.entities[0].properties == {"name": "Intro", "pages": "3"}
        assert graph.relationships[0].rel_type == "MENTIONS"

    asyncio.run(_run())

    assert str(seen[0].url) == "http://knowledge.test/api/graph/data"
    assert seen[0].headers["X-User-ID"] == "admin"


def test_fetch_stats_and_documents() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/knowledge/stats":
            return httpx.Response(200, json={"documents": 2, "entities": 5, "relationships": 4})
        assert request.url.path == "/api/documents"
        return httpx.Response(200, json={"documents": [{"doc_id": "d1", "content": None}]})

    async def _run() -> None:
        client, http_client = _client(handler)
        stats = await client.fetch_stats()
        documents = await client.fetch_documents()
        await http_client.aclose()

        assert (stats.documents, stats.entities, stats.relationships) == (2, 5, 4)
        assert documents.count == 1
        assert documents.documents[0].snippet(40) == ""

    asyncio.run(_run())


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="unavailable"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=[1, 2, 3]),
        httpx.Response(200, json={"entities": [{"label": "Document"}]}),
    ],
)
def test_fetch_graph_failures_raise_transient_error(response: httpx.Response) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    async def _run() -> None:
        client, http_client = _client(handler)
        with pytest.raises(TransientFetchFailure) as excinfo:
            await client.fetch_graph()
        await http_client.aclose()
        assert excinfo.value.resource == "graph"

    asyncio.run(_run())


def test_fetch_graph_accepts_blank_ids() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "entities": [{"id": "a", "label": "Document"}, {"id": "b"}, {"id": "  "}],
                "relationships": [
                    {"from_id": "a", "to_id": "", "rel_type": "MENTIONS"},
                    {"from_id": "a", "to_id": "b", "rel_type": "MENTIONS"},
                ],
            },
        )

    async def _run() -> None:
        client, http_client = _client(handler)
        graph = await client.fetch_graph()
        await http_client.aclose()

        assert graph.entity_ids == ["a", "b"]
        assert [(item.from_id, item.to_id) for item in graph.relationships] == [("a", ""), ("a", "b")]

    asyncio.run(_run())


def test_network_error_raises_transient_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def _run() -> None:
        client, http_client = _client(handler)
        with pytest.raises(TransientFetchFailure) as excinfo:
            await client.fetch_stats()
        await http_client.aclose()
        assert "connection refused" in str(excinfo.value)

    asyncio.run(_run())


def test_seed_posts_and_returns_result() -> None:
    methods: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        assert request.url.path == "/api/knowledge/seed"
        return httpx.Response(
            200,
            json={"status": "seeded", "documents_ingested": 3, "message": "Seeded 3 sample documents"},
        )

    async def _run() -> None:
        client, http_client = _client(handler)
        result = await client.seed()
        await http_client.aclose()
        assert result.documents_ingested == 3
        assert result.message == "Seeded 3 sample documents"

    asyncio.run(_run())
    assert methods == ["POST"]


def test_seed_failure_raises_seed_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    async def _run() -> None:
        client, http_client = _client(handler)
        with pytest.raises(SeedFailure) as excinfo:
            await client.seed()
        await http_client.aclose()
        assert excinfo.value.status_code == 500

    asyncio.run(_run())
