"""Tests for the drag lifecycle and selection state machine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from graphview.contracts import Position
from graphview.interaction import (
    InteractionController,
    InteractionState,
    PointerEvent,
    PointerEventHub,
    PointerEventType,
    ScreenToCanvasTransform,
)
from graphview.store import PositionStore


@dataclass(frozen=True)
class _Node:
    id: str
    x: float
    y: float


NODES = [_Node("doc-1", 100, 100), _Node("tech-1", 300, 200)]


def _controller(**kwargs):
    store = PositionStore()
    hub = PointerEventHub()
    controller = InteractionController(store, hub, **kwargs)
    return controller, store, hub


def test_pointer_down_on_node_starts_drag_and_selects() -> None:
    controller, _, hub = _controller()

    assert controller.pointer_down(105, 95, NODES) == "doc-1"

    assert controller.state is InteractionState.DRAGGING
    assert controller.session.dragged_id == "doc-1"
    assert controller.selected_id == "doc-1"
    assert hub.listener_count() == 3
    assert controller.is_listening


def test_pointer_move_writes_override_through_transform() -> None:
    transform = ScreenToCanvasTransform.from_screen_ctm(2, 0, 0, 2, 0, 0)
    controller, store, hub = _controller(transform=transform)

    controller.pointer_down(200, 200, NODES)
    hub.dispatch(PointerEvent(PointerEventType.MOVE, 240, 160))

    assert store.get_override("doc-1") == Position(120, 80)


def test_pointer_up_ends_drag_but_keeps_selection() -> None:
    controller, store, hub = _controller()
    controller.pointer_down(100, 100, NODES)
    hub.dispatch(PointerEvent(PointerEventType.MOVE, 120, 80))

    hub.dispatch(PointerEvent(PointerEventType.UP, 120, 80))

    assert controller.state is InteractionState.IDLE
    assert controller.dragged_id is None
    assert controller.selected_id == "doc-1"
    assert hub.listener_count() == 0
    hub.dispatch(PointerEvent(PointerEventType.MOVE, 10, 10))
    assert store.get_override("doc-1") == Position(120, 80)


def test_pointer_cancel_ends_drag() -> None:
    controller, _, hub = _controller()
    controller.pointer_down(300, 200, NODES)

    hub.dispatch(PointerEvent(PointerEventType.CANCEL))

    assert controller.dragged_id is None
    assert controller.selected_id == "tech-1"
    assert not controller.is_listening


def test_click_on_empty_canvas_clears_selection() -> None:
    controller, _, hub = _controller()
    controller.pointer_down(100, 100, NODES)
    hub.dispatch(PointerEvent(PointerEventType.UP))

    assert controller.pointer_down(500, 20, NODES) is None
    assert controller.selected_id is None
    assert hub.listener_count() == 0


def test_hit_test_prefers_topmost_node() -> None:
    overlapping = [_Node("below", 100, 100), _Node("above", 110, 100)]
    controller, _, _ = _controller()

    assert controller.hit_test(Position(105, 100), overlapping) == "above"
    assert controller.hit_test(Position(100, 121), overlapping) is None


def test_hit_radius_is_configurable() -> None:
    controller, _, _ = _controller(hit_radius=5)

    assert controller.hit_test(Position(106, 100), NODES) is None
    assert controller.hit_test(Position(104, 100), NODES) == "doc-1"


def test_teardown_mid_drag_releases_listeners_and_state() -> None:
    controller, _, hub = _controller()
    controller.pointer_down(100, 100, NODES)

    controller.teardown()

    assert hub.listener_count() == 0
    assert controller.dragged_id is None
    assert controller.selected_id is None


def test_new_drag_replaces_unfinished_drag_without_leaking_listeners() -> None:
    controller, _, hub = _controller()
    controller.begin_drag("doc-1")
    controller.begin_drag("tech-1")

    assert hub.listener_count() == 3
    assert controller.dragged_id == "tech-1"


def test_on_change_is_called_for_state_changes() -> None:
    changes: List[str] = []
    controller, _, hub = _controller(on_change=lambda: changes.append("changed"))

    controller.pointer_down(100, 100, NODES)
    hub.dispatch(PointerEvent(PointerEventType.MOVE, 110, 110))
    hub.dispatch(PointerEvent(PointerEventType.UP))
    controller.deselect()

    assert len(changes) == 4


def test_event_hub_unsubscribe_is_idempotent() -> None:
    hub = PointerEventHub()
    received: List[PointerEvent] = []
    unsubscribe = hub.subscribe(PointerEventType.MOVE, received.append)

    assert hub.dispatch(PointerEvent(PointerEventType.MOVE, 1, 2)) == 1
    unsubscribe()
    unsubscribe()

    assert hub.dispatch(PointerEvent(PointerEventType.MOVE, 3, 4)) == 0
    assert received == [PointerEvent(PointerEventType.MOVE, 1, 2)]
