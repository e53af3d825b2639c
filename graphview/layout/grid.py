"""Deterministic initial layouts for graph scenes."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Collection, Dict, Iterable, List, Mapping, Optional, Sequence

from typing_extensions import Protocol

from graphview.contracts import Position

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridShape:
    """Column and row counts plus cell size for a grid packing."""

    cols: int
    rows: int
    cell_width: float
    cell_height: float

    @property
    def capacity(self) -> int:
        return self.cols * self.rows


def grid_shape(count: int, canvas_width: float, canvas_height: float, padding: float) -> GridShape:
    """Return the grid dimensions used to pack ``count`` nodes.

    Columns follow the canvas aspect ratio so cells stay roughly square.
    Both counts are clamped to at least one so an empty input never divides
    by zero.
    """

    aspect = canvas_width / canvas_height if canvas_height else 1.0
    cols = max(math.ceil(math.sqrt(count * aspect)), 1)
    rows = max(math.ceil(count / cols), 1)
    cell_width = (canvas_width - 2 * padding) / cols
    cell_height = (canvas_height - 2 * padding) / rows
    return GridShape(cols=cols, rows=rows, cell_width=cell_width, cell_height=cell_height)


def compute_initial_layout(
    entity_ids: Sequence[str],
    canvas_width: float,
    canvas_height: float,
    padding: float,
) -> Dict[str, Position]:
    """Place entities at the centres of a grid covering the padded canvas.

    Entity ``i`` (in input order) lands in cell ``(i mod cols, i div cols)``.
    Identical inputs always produce identical output and no two entities
    share a cell. Repeated identifiers keep the slot of their first
    occurrence.

    Args:
        entity_ids: Ordered entity identifiers.
        canvas_width: Logical canvas width.
        canvas_height: Logical canvas height.
        padding: Margin kept free on every side of the canvas.

    Returns:
        Dict[str, Position]: Mapping of entity identifiers to cell centres.
    """

    unique_ids: List[str] = list(dict.fromkeys(entity_ids))
    if not unique_ids:
        return {}
    shape = grid_shape(len(unique_ids), canvas_width, canvas_height, padding)
    positions: Dict[str, Position] = {}
    for index, entity_id in enumerate(unique_ids):
        col = index % shape.cols
        row = index // shape.cols
        positions[entity_id] = Position(
            x=padding + col * shape.cell_width + shape.cell_width / 2,
            y=padding + row * shape.cell_height + shape.cell_height / 2,
        )
    return positions


class LayoutStrategy(Protocol):
    """Callable computing initial positions for an ordered id list."""

    def __call__(
        self,
        entity_ids: Sequence[str],
        canvas_width: float,
        canvas_height: float,
        padding: float,
    ) -> Mapping[str, Position]:
        """Return positions for ``entity_ids``."""


class IncrementalLayout:
    """Remember laid-out positions so refreshes only place new entities.

    Ids already present in the previous result, or pinned by a drag
    override, keep their position; the strategy only decides where new
    ids go. Ids that disappear from the input are forgotten.
    """

    def __init__(
        self,
        canvas_width: float,
        canvas_height: float,
        padding: float,
        *,
        strategy: Optional[LayoutStrategy] = None,
    ) -> None:
        self._canvas_width = canvas_width
        self._canvas_height = canvas_height
        self._padding = padding
        self._strategy: LayoutStrategy = strategy or compute_initial_layout
        self._positions: Dict[str, Position] = {}

    @property
    def positions(self) -> Dict[str, Position]:
        """Return a copy of the current layout result."""

        return dict(self._positions)

    def update(
        self,
        entity_ids: Sequence[str],
        pinned: Collection[str] = (),
        occupied: Iterable[Position] = (),
    ) -> Dict[str, Position]:
        """Lay out newly seen ids and return the layout for the current ids.

        The strategy is asked for slots covering every current id. Each
        remembered position and each ``occupied`` position claims its
        nearest slot, and new ids fill the unclaimed slots in order, so
        they never land on a node that is already placed.

        Args:
            entity_ids: Ordered identifiers from the latest snapshot.
            pinned: Identifiers whose position is owned by an override.
            occupied: Positions held by overrides.

        Returns:
            Dict[str, Position]: Layout positions for the current ids that
                are not pinned, in input order.
        """

        current = list(dict.fromkeys(entity_ids))
        current_set = set(current)
        for stale_id in [node_id for node_id in self._positions if node_id not in current_set]:
            del self._positions[stale_id]

        fresh_ids = [node_id for node_id in current if node_id not in self._positions and node_id not in pinned]
        if fresh_ids:
            placed = self._strategy(current, self._canvas_width, self._canvas_height, self._padding)
            slots = list(dict.fromkeys(placed[node_id] for node_id in current if node_id in placed))
            held_positions = [position for node_id, position in self._positions.items() if node_id not in pinned]
            for held in [*held_positions, *occupied]:
                if not slots:
                    break
                slots.remove(min(slots, key=lambda slot: math.hypot(slot.x - held.x, slot.y - held.y)))
            if len(slots) < len(fresh_ids):
                LOGGER.warning(
                    "Layout strategy left %d of %d new entities without a free slot",
                    len(fresh_ids) - len(slots),
                    len(fresh_ids),
                )
            for node_id, slot in zip(fresh_ids, slots):
                self._positions[node_id] = slot
            LOGGER.debug("Placed %d new entities (total=%d)", len(fresh_ids), len(current))

        return {node_id: self._positions[node_id] for node_id in current if node_id in self._positions}

    def forget(self, entity_ids: Iterable[str]) -> None:
        """Drop remembered positions so the ids are laid out again when seen."""

        for node_id in entity_ids:
            self._positions.pop(node_id, None)

    def reset(self) -> None:
        self._positions.clear()


__all__ = ["GridShape", "IncrementalLayout", "LayoutStrategy", "compute_initial_layout", "grid_shape"]
