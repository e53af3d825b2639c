"""Pointer-drag lifecycle and selection state for the graph canvas."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Sequence

from typing_extensions import Protocol

from graphview.contracts import Position
from graphview.interaction.events import PointerEvent, PointerEventSource, PointerEventType, Unsubscribe
from graphview.interaction.transform import ScreenToCanvasTransform
from graphview.store import PositionStore

LOGGER = logging.getLogger(__name__)


class InteractionState(str, Enum):
    """States of the drag state machine."""

    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class DragSession:
    """Snapshot of the dragged and selected node identifiers."""

    dragged_id: Optional[str] = None
    selected_id: Optional[str] = None


class HitTarget(Protocol):
    """Anything drawn on the canvas with an id and a centre point."""

    @property
    def id(self) -> str: ...

    @property
    def x(self) -> float: ...

    @property
    def y(self) -> float: ...


class InteractionController:
    """Drive Idle -> Dragging -> Idle transitions and write drag overrides.

    Move, up and cancel listeners are attached to the global event source
    only while a drag is in progress and are removed as soon as it ends.
    """

    def __init__(
        self,
        store: PositionStore,
        events: PointerEventSource,
        transform: Optional[ScreenToCanvasTransform] = None,
        *,
        hit_radius: float = 20.0,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._store = store
        self._events = events
        self._transform = transform or ScreenToCanvasTransform.identity()
        self._hit_radius = hit_radius
        self._on_change = on_change
        self._session = DragSession()
        self._unsubscribers: List[Unsubscribe] = []

    @property
    def state(self) -> InteractionState:
        if self._session.dragged_id is None:
            return InteractionState.IDLE
        return InteractionState.DRAGGING

    @property
    def session(self) -> DragSession:
        return self._session

    @property
    def dragged_id(self) -> Optional[str]:
        return self._session.dragged_id

    @property
    def selected_id(self) -> Optional[str]:
        return self._session.selected_id

    @property
    def transform(self) -> ScreenToCanvasTransform:
        return self._transform

    @property
    def is_listening(self) -> bool:
        return bool(self._unsubscribers)

    def set_transform(self, transform: ScreenToCanvasTransform) -> None:
        """Replace the screen-to-canvas transform, e.g. after a resize or zoom."""

        self._transform = transform

    def to_canvas(self, screen_x: float, screen_y: float) -> Position:
        return self._transform.to_canvas(screen_x, screen_y)

    def hit_test(self, position: Position, nodes: Sequence[HitTarget]) -> Optional[str]:
        """Return the id of the topmost node whose hit circle contains ``position``.

        Later nodes are drawn on top, so the search runs back to front.
        """

        for node in reversed(nodes):
            if math.hypot(node.x - position.x, node.y - position.y) <= self._hit_radius:
                return node.id
        return None

    def pointer_down(self, screen_x: float, screen_y: float, nodes: Sequence[HitTarget]) -> Optional[str]:
        """Handle a pointer press on the canvas.

        A press over a node starts dragging it and selects it. A press on
        empty canvas clears the selection.

        Returns:
            Optional[str]: The id of the node being dragged, if any.
        """

        position = self.to_canvas(screen_x, screen_y)
        node_id = self.hit_test(position, nodes)
        if node_id is None:
            self.end_drag()
            self.deselect()
            return None
        self.begin_drag(node_id)
        return node_id

    def begin_drag(self, node_id: str) -> None:
        """Start dragging ``node_id`` and mark it selected."""

        if self._session.dragged_id is not None:
            LOGGER.debug("Replacing unfinished drag of %s with %s", self._session.dragged_id, node_id)
            self._release_listeners()
        self._session = DragSession(dragged_id=node_id, selected_id=node_id)
        self._unsubscribers = [
            self._events.subscribe(PointerEventType.MOVE, self._handle_move),
            self._events.subscribe(PointerEventType.UP, self._handle_release),
            self._events.subscribe(PointerEventType.CANCEL, self._handle_release),
        ]
        self._notify()

    def end_drag(self) -> None:
        """Return to Idle, keeping the current selection."""

        if self._session.dragged_id is None and not self._unsubscribers:
            return
        self._release_listeners()
        self._session = replace(self._session, dragged_id=None)
        self._notify()

    def select(self, node_id: Optional[str]) -> None:
        if self._session.selected_id == node_id:
            return
        self._session = replace(self._session, selected_id=node_id)
        self._notify()

    def deselect(self) -> None:
        self.select(None)

    def teardown(self) -> None:
        """Drop all listeners and state, e.g. when the canvas is unmounted."""

        self._release_listeners()
        self._session = DragSession()

    def _handle_move(self, event: PointerEvent) -> None:
        dragged_id = self._session.dragged_id
        if dragged_id is None:
            return
        self._store.set_override(dragged_id, self.to_canvas(event.screen_x, event.screen_y))
        self._notify()

    def _handle_release(self, event: PointerEvent) -> None:
        LOGGER.debug("Drag of %s ended by pointer %s", self._session.dragged_id, event.type.value)
        self.end_drag()

    def _release_listeners(self) -> None:
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()


__all__ = ["DragSession", "HitTarget", "InteractionController", "InteractionState"]
