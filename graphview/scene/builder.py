"""Assemble renderable scenes from graph snapshots and positions."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from typing_extensions import Protocol

from graphview.contracts import Entity, Position, Relationship
from graphview.scene.palette import NodeCategory, PaletteEntry, PALETTE

LOGGER = logging.getLogger(__name__)

DISPLAY_NAME_KEYS = ("name", "content_preview")


@dataclass(frozen=True)
class VisualNode:
    """Entity resolved to a canvas position with display attributes."""

    id: str
    label: str
    properties: Mapping[str, str]
    x: float
    y: float
    display_name: str
    category: NodeCategory
    palette: PaletteEntry

    @property
    def position(self) -> Position:
        return Position(x=self.x, y=self.y)

    @property
    def title(self) -> str:
        """Return the full, untruncated name used for tooltips and inspectors."""

        return self.properties.get("name") or self.id


@dataclass(frozen=True)
class VisualEdge:
    """Relationship whose endpoints resolved to nodes in the same scene."""

    from_id: str
    to_id: str
    rel_type: str
    source: VisualNode
    target: VisualNode


@dataclass(frozen=True)
class Scene:
    """Nodes and edges ready to be painted, in deterministic order."""

    nodes: Tuple[VisualNode, ...] = ()
    edges: Tuple[VisualEdge, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def node(self, node_id: Optional[str]) -> Optional[VisualNode]:
        if node_id is None:
            return None
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


class SceneRenderer(Protocol):
    """Sink that paints a scene on some drawing surface."""

    def render(self, scene: Scene) -> None:
        """Draw ``scene``."""


def display_name(entity: Entity, max_chars: int = 12, ellipsis: str = "…") -> str:
    """Return the short on-canvas name for ``entity``.

    Prefers the ``name`` property, then ``content_preview``, then the id,
    truncated to ``max_chars`` characters followed by ``ellipsis``.
    """

    name = entity.id
    for key in DISPLAY_NAME_KEYS:
        candidate = entity.properties.get(key)
        if candidate:
            name = candidate
            break
    if len(name) > max_chars:
        return name[:max_chars] + ellipsis
    return name


class SceneBuilder:
    """Join entities, relationships and positions into a :class:`Scene`."""

    def __init__(
        self,
        *,
        fallback_position: Position = Position(x=300.0, y=200.0),
        label_max_chars: int = 12,
        ellipsis: str = "…",
    ) -> None:
        self._fallback_position = fallback_position
        self._label_max_chars = label_max_chars
        self._ellipsis = ellipsis

    def build(
        self,
        entities: Sequence[Entity],
        relationships: Sequence[Relationship],
        positions: Mapping[str, Position],
    ) -> Scene:
        """Build a scene preserving entity and relationship input order.

        Relationships referencing an entity that is not part of ``entities``
        are left out without raising.
        """

        nodes: List[VisualNode] = []
        index: Dict[str, VisualNode] = {}
        for entity in entities:
            if entity.id in index:
                LOGGER.debug("Ignoring duplicate entity id %s", entity.id)
                continue
            node = self._build_node(entity, positions.get(entity.id))
            index[entity.id] = node
            nodes.append(node)

        edges: List[VisualEdge] = []
        dropped = 0
        for relationship in relationships:
            source = index.get(relationship.from_id)
            target = index.get(relationship.to_id)
            if source is None or target is None:
                dropped += 1
                continue
            edges.append(
                VisualEdge(
                    from_id=relationship.from_id,
                    to_id=relationship.to_id,
                    rel_type=relationship.rel_type,
                    source=source,
                    target=target,
                )
            )
        if dropped:
            LOGGER.debug("Dropped %d relationships with unresolved endpoints", dropped)
        return Scene(nodes=tuple(nodes), edges=tuple(edges))

    def _build_node(self, entity: Entity, position: Optional[Position]) -> VisualNode:
        resolved = position or self._fallback_position
        category = NodeCategory.classify(entity.label)
        return VisualNode(
            id=entity.id,
            label=entity.label,
            properties=dict(entity.properties),
            x=resolved.x,
            y=resolved.y,
            display_name=display_name(entity, self._label_max_chars, self._ellipsis),
            category=category,
            palette=PALETTE[category],
        )


__all__ = ["Scene", "SceneBuilder", "SceneRenderer", "VisualEdge", "VisualNode", "display_name"]
