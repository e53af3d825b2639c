"""Composition of fetcher, layout, position store, interaction and scene."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Sequence, Tuple

from graphview.config import AppConfig
from graphview.contracts import DocumentList, GraphData, KnowledgeStats, Position
from graphview.exceptions import SeedFailure
from graphview.fetcher import DataFetcher, KnowledgeAPIClient, Resource, Snapshot
from graphview.interaction import (
    InteractionController,
    PointerEvent,
    PointerEventHub,
    PointerEventType,
    ScreenToCanvasTransform,
)
from graphview.layout import IncrementalLayout
from graphview.scene import Scene, SceneBuilder, SceneRenderer, VisualEdge, VisualNode
from graphview.store import PositionStore

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """One-shot message for the host view, drained after it is read."""

    kind: str
    ok: bool
    message: str
    documents_ingested: Optional[int] = None


class GraphViewEngine:
    """Keep a positioned scene in sync with polled data and pointer input.

    Graph refreshes only lay out entities that have not been seen before,
    so nodes that already have a position (computed or dragged) stay put.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        client: Optional[KnowledgeAPIClient] = None,
        fetcher: Optional[DataFetcher] = None,
        store: Optional[PositionStore] = None,
        events: Optional[PointerEventHub] = None,
        layout: Optional[IncrementalLayout] = None,
        builder: Optional[SceneBuilder] = None,
        renderers: Sequence[SceneRenderer] = (),
    ) -> None:
        self._config = config
        self._client = client or KnowledgeAPIClient(config.api)
        self._fetcher = fetcher or DataFetcher(self._client, config.polling)
        self._store = store or PositionStore()
        self._events = events or PointerEventHub()
        canvas = config.canvas
        self._layout = layout or IncrementalLayout(canvas.width, canvas.height, canvas.padding)
        centre_x, centre_y = canvas.centre
        self._builder = builder or SceneBuilder(
            fallback_position=Position(x=centre_x, y=centre_y),
            label_max_chars=config.scene.label_max_chars,
            ellipsis=config.scene.ellipsis,
        )
        self._controller = InteractionController(
            self._store,
            self._events,
            hit_radius=canvas.node_radius,
            on_change=self._rebuild,
        )
        self._renderers: List[SceneRenderer] = list(renderers)
        self._graph = GraphData()
        self._layout_positions: dict[str, Position] = {}
        self._scene = Scene()
        self._notifications: Deque[Notification] = deque()
        self._closed = False
        self._unsubscribe = self._fetcher.subscribe(self._on_snapshot)

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def fetcher(self) -> DataFetcher:
        return self._fetcher

    @property
    def store(self) -> PositionStore:
        return self._store

    @property
    def controller(self) -> InteractionController:
        return self._controller

    @property
    def events(self) -> PointerEventHub:
        return self._events

    @property
    def snapshot(self) -> Snapshot:
        return self._fetcher.snapshot

    @property
    def scene(self) -> Scene:
        return self._scene

    @property
    def nodes(self) -> Tuple[VisualNode, ...]:
        return self._scene.nodes

    @property
    def edges(self) -> Tuple[VisualEdge, ...]:
        return self._scene.edges

    @property
    def selected_node(self) -> Optional[VisualNode]:
        return self._scene.node(self._controller.selected_id)

    @property
    def dragged_id(self) -> Optional[str]:
        return self._controller.dragged_id

    @property
    def degraded(self) -> bool:
        return self._fetcher.degraded

    @property
    def loading(self) -> bool:
        return not self.snapshot.is_loaded(Resource.GRAPH)

    @property
    def stats(self) -> KnowledgeStats:
        return self.snapshot.stats

    @property
    def documents(self) -> DocumentList:
        return self.snapshot.documents

    @property
    def running(self) -> bool:
        return self._fetcher.running

    def add_renderer(self, renderer: SceneRenderer) -> None:
        self._renderers.append(renderer)
        renderer.render(self._scene)

    def apply_graph(self, graph: GraphData) -> Scene:
        """Integrate a new graph snapshot and rebuild the scene.

        Overrides for entities that disappeared are pruned; only entities
        without a remembered or overridden position reach the layout.
        """

        self._graph = graph
        current_ids = graph.entity_ids
        self._store.prune_overrides(current_ids)
        overrides = self._store.overrides
        self._layout_positions = self._layout.update(
            current_ids,
            pinned=set(overrides),
            occupied=list(overrides.values()),
        )

        present = set(current_ids)
        if self._controller.dragged_id is not None and self._controller.dragged_id not in present:
            self._controller.end_drag()
        if self._controller.selected_id is not None and self._controller.selected_id not in present:
            self._controller.deselect()
        return self._rebuild()

    async def refresh(self) -> bool:
        """Fetch all resources now; returns ``False`` if any poll failed."""

        return await self._fetcher.refresh()

    async def seed(self, *, notify: bool = True) -> Notification:
        """Seed sample data and return the outcome.

        With ``notify`` the outcome is also queued for :meth:`drain_notifications`.
        """

        try:
            result = await self._fetcher.seed()
        except SeedFailure as exc:
            LOGGER.warning("Seeding sample data failed: %s", exc.detail)
            notification = Notification(kind="seed", ok=False, message=str(exc))
        else:
            message = result.message or f"Seeded {result.documents_ingested} documents"
            notification = Notification(
                kind="seed",
                ok=True,
                message=message,
                documents_ingested=result.documents_ingested,
            )
        if notify:
            self._notifications.append(notification)
        return notification

    def drain_notifications(self) -> List[Notification]:
        drained = list(self._notifications)
        self._notifications.clear()
        return drained

    def pointer_down(self, screen_x: float, screen_y: float) -> Optional[str]:
        return self._controller.pointer_down(screen_x, screen_y, self._scene.nodes)

    def pointer_move(self, screen_x: float, screen_y: float) -> int:
        return self._events.dispatch(PointerEvent(PointerEventType.MOVE, screen_x, screen_y))

    def pointer_up(self, screen_x: float = 0.0, screen_y: float = 0.0) -> int:
        return self._events.dispatch(PointerEvent(PointerEventType.UP, screen_x, screen_y))

    def pointer_cancel(self) -> int:
        return self._events.dispatch(PointerEvent(PointerEventType.CANCEL))

    def set_transform(self, transform: ScreenToCanvasTransform) -> None:
        self._controller.set_transform(transform)

    def set_viewport(
        self,
        *,
        client_left: float,
        client_top: float,
        client_width: float,
        client_height: float,
        device_pixel_ratio: float = 1.0,
        pan_x: float = 0.0,
        pan_y: float = 0.0,
        zoom: float = 1.0,
    ) -> ScreenToCanvasTransform:
        """Recompute the pointer transform for the canvas' on-screen placement.

        Raises:
            TransformError: If the viewport is degenerate.
        """

        transform = ScreenToCanvasTransform.from_viewport(
            canvas_width=self._config.canvas.width,
            canvas_height=self._config.canvas.height,
            client_left=client_left,
            client_top=client_top,
            client_width=client_width,
            client_height=client_height,
            device_pixel_ratio=device_pixel_ratio,
            pan_x=pan_x,
            pan_y=pan_y,
            zoom=zoom,
        )
        self._controller.set_transform(transform)
        return transform

    def deselect(self) -> None:
        self._controller.deselect()

    def start(self) -> None:
        """Start polling; must be called from a running event loop."""

        if self._closed:
            raise RuntimeError("Engine has been closed")
        self._fetcher.start()

    async def close(self) -> None:
        """Stop polling, drop pointer listeners and release the HTTP client."""

        if self._closed:
            return
        self._closed = True
        self._unsubscribe()
        await self._fetcher.stop()
        self._controller.teardown()
        await self._client.aclose()
        LOGGER.info("Graph view engine closed")

    def _on_snapshot(self, resource: Resource, snapshot: Snapshot) -> None:
        if resource is Resource.GRAPH:
            self.apply_graph(snapshot.graph)

    def _rebuild(self) -> Scene:
        positions = self._store.merge(self._layout_positions)
        self._scene = self._builder.build(self._graph.entities, self._graph.relationships, positions)
        for renderer in self._renderers:
            renderer.render(self._scene)
        return self._scene


__all__ = ["GraphViewEngine", "Notification"]
