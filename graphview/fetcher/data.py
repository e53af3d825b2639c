"""Polled snapshot of the knowledge API resources backing the graph view."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Dict, FrozenSet, List, Optional

from graphview.config import PollingConfig
from graphview.contracts import DocumentList, GraphData, KnowledgeStats, SeedResult
from graphview.exceptions import TransientFetchFailure
from graphview.fetcher.client import KnowledgeAPIClient
from graphview.fetcher.scheduler import PollScheduler

LOGGER = logging.getLogger(__name__)


class Resource(str, Enum):
    """Independently polled slices of the snapshot."""

    GRAPH = "graph"
    STATS = "stats"
    DOCUMENTS = "documents"


@dataclass(frozen=True)
class Snapshot:
    """Latest known value of every resource plus per-slice health."""

    graph: GraphData = field(default_factory=GraphData)
    stats: KnowledgeStats = field(default_factory=KnowledgeStats)
    documents: DocumentList = field(default_factory=DocumentList)
    loaded: FrozenSet[Resource] = frozenset()
    degraded_resources: FrozenSet[Resource] = frozenset()
    updated_at: Optional[datetime] = None

    @property
    def degraded(self) -> bool:
        return bool(self.degraded_resources)

    def is_loaded(self, resource: Resource) -> bool:
        return resource in self.loaded


SnapshotListener = Callable[[Resource, Snapshot], None]


class DataFetcher:
    """Keep the snapshot current by polling each resource on its own interval.

    A failed poll leaves the previous value of that slice in place and marks
    it degraded until the next successful poll of the same resource.
    """

    def __init__(
        self,
        client: KnowledgeAPIClient,
        polling: Optional[PollingConfig] = None,
        *,
        scheduler: Optional[PollScheduler] = None,
    ) -> None:
        self._client = client
        self._polling = polling or PollingConfig()
        self._scheduler = scheduler or PollScheduler()
        self._snapshot = Snapshot()
        self._listeners: List[SnapshotListener] = []
        self._jobs_registered = False

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def degraded(self) -> bool:
        return self._snapshot.degraded

    @property
    def scheduler(self) -> PollScheduler:
        return self._scheduler

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register ``listener`` for successful slice replacements."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def poll(self, resource: Resource) -> bool:
        """Fetch one resource and replace its slice.

        Returns:
            bool: ``True`` when the slice was replaced, ``False`` when the poll
            failed and the previous value was kept.
        """

        try:
            if resource is Resource.GRAPH:
                graph = await self._client.fetch_graph()
                updated = replace(self._snapshot, graph=graph)
            elif resource is Resource.STATS:
                stats = await self._client.fetch_stats()
                updated = replace(self._snapshot, stats=stats)
            else:
                documents = await self._client.fetch_documents()
                updated = replace(self._snapshot, documents=documents)
        except TransientFetchFailure as exc:
            LOGGER.warning("Keeping previous %s snapshot: %s", resource.value, exc)
            self._snapshot = replace(
                self._snapshot,
                degraded_resources=self._snapshot.degraded_resources | {resource},
            )
            return False

        self._snapshot = replace(
            updated,
            loaded=updated.loaded | {resource},
            degraded_resources=updated.degraded_resources - {resource},
            updated_at=datetime.now(timezone.utc),
        )
        self._notify(resource)
        return True

    async def poll_graph(self) -> bool:
        return await self.poll(Resource.GRAPH)

    async def poll_stats(self) -> bool:
        return await self.poll(Resource.STATS)

    async def poll_documents(self) -> bool:
        return await self.poll(Resource.DOCUMENTS)

    async def refresh(self) -> bool:
        """Fetch every resource now, concurrently."""

        results = await asyncio.gather(
            self.poll(Resource.GRAPH),
            self.poll(Resource.STATS),
            self.poll(Resource.DOCUMENTS),
        )
        return all(results)

    async def seed(self) -> SeedResult:
        """Post the seed request and refresh once it completes.

        Raises:
            SeedFailure: Propagated from the client; the request is not retried.
        """

        result = await self._client.seed()
        LOGGER.info(
            "Seeded sample data",
            extra={"status": result.status, "documents_ingested": result.documents_ingested},
        )
        await self.refresh()
        return result

    def start(self) -> None:
        """Begin polling on the running event loop."""

        if not self._jobs_registered:
            intervals: Dict[Resource, float] = {
                Resource.GRAPH: self._polling.graph_interval_seconds,
                Resource.STATS: self._polling.stats_interval_seconds,
                Resource.DOCUMENTS: self._polling.documents_interval_seconds,
            }
            for resource, interval in intervals.items():
                self._scheduler.add(resource.value, interval, self._poll_callback(resource))
            self._jobs_registered = True
        self._scheduler.start()

    async def stop(self) -> None:
        await self._scheduler.stop()

    def _poll_callback(self, resource: Resource) -> Callable[[], Awaitable[bool]]:
        def _callback() -> Awaitable[bool]:
            return self.poll(resource)

        return _callback

    def _notify(self, resource: Resource) -> None:
        for listener in list(self._listeners):
            try:
                listener(resource, self._snapshot)
            except Exception:
                LOGGER.exception("Snapshot listener failed for %s", resource.value)


__all__ = ["DataFetcher", "Resource", "Snapshot", "SnapshotListener"]
