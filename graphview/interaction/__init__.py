"""Pointer interaction, selection and coordinate transforms."""

from .controller import DragSession, HitTarget, InteractionController, InteractionState
from .events import PointerEvent, PointerEventHub, PointerEventSource, PointerEventType
from .transform import AffineTransform, ScreenToCanvasTransform

__all__ = [
    "AffineTransform",
    "DragSession",
    "HitTarget",
    "InteractionController",
    "InteractionState",
    "PointerEvent",
    "PointerEventHub",
    "PointerEventSource",
    "PointerEventType",
    "ScreenToCanvasTransform",
]
