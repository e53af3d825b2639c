"""FastAPI application factory for the graph view host."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from graphview import __version__
from graphview.config import AppConfig, load_config
from graphview.engine import GraphViewEngine, Notification
from graphview.exceptions import TransformError
from graphview.scene import VisualEdge, VisualNode

LOGGER = logging.getLogger(__name__)

EMPTY_PLACEHOLDER = "No entities yet. Seed sample data or ingest documents to populate the graph."
LOADING_PLACEHOLDER = "Loading graph..."


class PointerRequest(BaseModel):
    """Pointer position in client (screen) coordinates."""

    x: float = 0.0
    y: float = 0.0


class ViewportRequest(BaseModel):
    """On-screen placement of the canvas used to build the pointer transform."""

    client_left: float = 0.0
    client_top: float = 0.0
    client_width: float = Field(..., gt=0)
    client_height: float = Field(..., gt=0)
    device_pixel_ratio: float = Field(1.0, gt=0)
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = Field(1.0, gt=0)


class NodePayload(BaseModel):
    """Positioned node ready to draw."""

    id: str
    label: str
    display_name: str
    x: float
    y: float
    palette: Dict[str, object]
    selected: bool = False
    dragging: bool = False


class EdgePayload(BaseModel):
    """Edge with resolved endpoint coordinates."""

    from_id: str
    to_id: str
    rel_type: str
    x1: float
    y1: float
    x2: float
    y2: float


class SelectedPayload(BaseModel):
    """Inspector summary of the selected node."""

    id: str
    title: str
    label: str
    properties: Dict[str, str] = Field(default_factory=dict)


class DocumentPreview(BaseModel):
    """Short reference to an ingested document."""

    doc_id: str
    snippet: str


class StatsPayload(BaseModel):
    documents: int = 0
    entities: int = 0
    relationships: int = 0


class ScenePayload(BaseModel):
    """Everything the client needs to paint the graph panel."""

    nodes: List[NodePayload]
    edges: List[EdgePayload]
    node_count: int
    edge_count: int
    selected: Optional[SelectedPayload] = None
    degraded: bool = False
    loading: bool = False
    empty: bool = False
    placeholder: Optional[str] = None
    summary: str
    stats: StatsPayload
    documents: List[DocumentPreview] = Field(default_factory=list)
    document_count: int = 0


class NotificationPayload(BaseModel):
    kind: str
    ok: bool
    message: str
    documents_ingested: Optional[int] = None


class PointerResponse(BaseModel):
    """Interaction state after a pointer event."""

    dragged_id: Optional[str] = None
    selected_id: Optional[str] = None
    node: Optional[NodePayload] = None


def create_app(
    config: AppConfig | None = None,
    engine: Optional[GraphViewEngine] = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        config: Optional pre-loaded configuration. If omitted, the default
            configuration defined in config.yaml is used.
        engine: Optional pre-built engine, mainly for tests. When omitted an
            engine talking to the configured knowledge API is created.

    Returns:
        FastAPI: Configured FastAPI application.
    """

    resolved_config = config or (engine.config if engine is not None else load_config())
    app = FastAPI(title="Graph View", version=__version__)
    app.state.app_config = resolved_config
    graph_engine = engine or GraphViewEngine(resolved_config)
    app.state.engine = graph_engine

    @app.on_event("startup")
    async def _start_polling() -> None:
        graph_engine.start()

    @app.on_event("shutdown")
    async def _close_engine() -> None:
        await graph_engine.close()

    allowed_origins = resolved_config.host.allowed_origins
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _engine(request: Request) -> GraphViewEngine:
        return request.app.state.engine

    def _pointer_response(current: GraphViewEngine) -> PointerResponse:
        controller = current.controller
        node_id = controller.dragged_id or controller.selected_id
        node = current.scene.node(node_id)
        return PointerResponse(
            dragged_id=controller.dragged_id,
            selected_id=controller.selected_id,
            node=_node_payload(node, current) if node is not None else None,
        )

    @app.get("/health", tags=["system"], summary="Service health check")
    def health() -> dict[str, str]:
        """Return service health information."""

        return {"status": "ok", "version": __version__}

    @app.get("/api/graph/scene", tags=["graph"], summary="Current positioned scene")
    def get_scene(request: Request) -> ScenePayload:
        return _scene_payload(_engine(request))

    @app.post("/api/graph/refresh", tags=["graph"], summary="Fetch all resources now")
    async def refresh(request: Request) -> ScenePayload:
        current = _engine(request)
        await current.refresh()
        return _scene_payload(current)

    @app.post("/api/graph/seed", tags=["graph"], summary="Seed sample data")
    async def seed(request: Request) -> NotificationPayload:
        current = _engine(request)
        notification = await current.seed(notify=False)
        if not notification.ok:
            raise HTTPException(status_code=502, detail=notification.message)
        return _notification_payload(notification)

    @app.get("/api/graph/notifications", tags=["graph"], summary="Drain one-shot notifications")
    def notifications(request: Request) -> List[NotificationPayload]:
        return [_notification_payload(item) for item in _engine(request).drain_notifications()]

    @app.post("/api/graph/pointer/down", tags=["interaction"])
    def pointer_down(payload: PointerRequest, request: Request) -> PointerResponse:
        current = _engine(request)
        current.pointer_down(payload.x, payload.y)
        return _pointer_response(current)

    @app.post("/api/graph/pointer/move", tags=["interaction"])
    def pointer_move(payload: PointerRequest, request: Request) -> PointerResponse:
        current = _engine(request)
        current.pointer_move(payload.x, payload.y)
        return _pointer_response(current)

    @app.post("/api/graph/pointer/up", tags=["interaction"])
    def pointer_up(payload: PointerRequest, request: Request) -> PointerResponse:
        current = _engine(request)
        current.pointer_up(payload.x, payload.y)
        return _pointer_response(current)

    @app.post("/api/graph/pointer/cancel", tags=["interaction"])
    def pointer_cancel(request: Request) -> PointerResponse:
        current = _engine(request)
        current.pointer_cancel()
        return _pointer_response(current)

    @app.post("/api/graph/viewport", tags=["interaction"], summary="Update the pointer transform")
    def set_viewport(payload: ViewportRequest, request: Request) -> Dict[str, List[float]]:
        try:
            transform = _engine(request).set_viewport(**payload.model_dump())
        except TransformError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"screen_to_canvas": list(transform.components)}

    @app.post("/api/graph/deselect", tags=["interaction"])
    def deselect(request: Request) -> PointerResponse:
        current = _engine(request)
        current.deselect()
        return _pointer_response(current)

    return app


def _node_payload(node: VisualNode, engine: GraphViewEngine) -> NodePayload:
    return NodePayload(
        id=node.id,
        label=node.label,
        display_name=node.display_name,
        x=node.x,
        y=node.y,
        palette=node.palette.to_dict(),
        selected=node.id == engine.controller.selected_id,
        dragging=node.id == engine.controller.dragged_id,
    )


def _edge_payload(edge: VisualEdge) -> EdgePayload:
    return EdgePayload(
        from_id=edge.from_id,
        to_id=edge.to_id,
        rel_type=edge.rel_type,
        x1=edge.source.x,
        y1=edge.source.y,
        x2=edge.target.x,
        y2=edge.target.y,
    )


def _scene_payload(engine: GraphViewEngine) -> ScenePayload:
    """Serialize the engine state for the graph panel."""

    scene = engine.scene
    scene_config = engine.config.scene
    selected = engine.selected_node
    stats = engine.stats
    documents = engine.documents
    placeholder: Optional[str] = None
    if engine.loading:
        placeholder = LOADING_PLACEHOLDER
    elif scene.is_empty:
        placeholder = EMPTY_PLACEHOLDER
    return ScenePayload(
        nodes=[_node_payload(node, engine) for node in scene.nodes],
        edges=[_edge_payload(edge) for edge in scene.edges],
        node_count=scene.node_count,
        edge_count=scene.edge_count,
        selected=(
            SelectedPayload(
                id=selected.id,
                title=selected.title,
                label=selected.label,
                properties=dict(selected.properties),
            )
            if selected is not None
            else None
        ),
        degraded=engine.degraded,
        loading=engine.loading,
        empty=scene.is_empty,
        placeholder=placeholder,
        summary=f"{scene.node_count} entities • {scene.edge_count} edges",
        stats=StatsPayload(
            documents=stats.documents,
            entities=stats.entities,
            relationships=stats.relationships,
        ),
        documents=[
            DocumentPreview(doc_id=item.doc_id, snippet=item.snippet(scene_config.document_snippet_chars))
            for item in documents.documents[: scene_config.document_preview_limit]
        ],
        document_count=documents.count,
    )


def _notification_payload(notification: Notification) -> NotificationPayload:
    return NotificationPayload(
        kind=notification.kind,
        ok=notification.ok,
        message=notification.message,
        documents_ingested=notification.documents_ingested,
    )


__all__ = ["create_app"]
