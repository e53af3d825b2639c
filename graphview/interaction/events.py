"""Global pointer event plumbing used while a drag is active."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List

from typing_extensions import Protocol

LOGGER = logging.getLogger(__name__)


class PointerEventType(str, Enum):
    """Window-level pointer events the controller listens to while dragging."""

    MOVE = "move"
    UP = "up"
    CANCEL = "cancel"


@dataclass(frozen=True)
class PointerEvent:
    """Pointer event in device/screen coordinates."""

    type: PointerEventType
    screen_x: float = 0.0
    screen_y: float = 0.0


PointerHandler = Callable[[PointerEvent], None]
Unsubscribe = Callable[[], None]


class PointerEventSource(Protocol):
    """Source of global pointer events (typically the host window)."""

    def subscribe(self, event_type: PointerEventType, handler: PointerHandler) -> Unsubscribe:
        """Register ``handler`` and return a callable removing it again."""


class PointerEventHub(PointerEventSource):
    """In-process event source that the host view feeds pointer events into."""

    def __init__(self) -> None:
        self._handlers: Dict[PointerEventType, List[PointerHandler]] = {kind: [] for kind in PointerEventType}

    def subscribe(self, event_type: PointerEventType, handler: PointerHandler) -> Unsubscribe:
        handlers = self._handlers[event_type]
        handlers.append(handler)

        def _unsubscribe() -> None:
            try:
                handlers.remove(handler)
            except ValueError:
                LOGGER.debug("Pointer handler already removed for %s", event_type.value)

        return _unsubscribe

    def dispatch(self, event: PointerEvent) -> int:
        """Deliver ``event`` to current subscribers.

        Returns:
            int: Number of handlers invoked. Events with no subscriber are
                dropped, which is the normal case while no drag is active.
        """

        handlers = list(self._handlers[event.type])
        for handler in handlers:
            handler(event)
        return len(handlers)

    def listener_count(self, event_type: PointerEventType | None = None) -> int:
        if event_type is not None:
            return len(self._handlers[event_type])
        return sum(len(handlers) for handlers in self._handlers.values())


__all__ = [
    "PointerEvent",
    "PointerEventHub",
    "PointerEventSource",
    "PointerEventType",
    "PointerHandler",
    "Unsubscribe",
]
