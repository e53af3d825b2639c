"""Scene assembly for the graph canvas."""

from .builder import Scene, SceneBuilder, SceneRenderer, VisualEdge, VisualNode, display_name
from .palette import DEFAULT_PALETTE_ENTRY, PALETTE, NodeCategory, PaletteEntry, palette_for

__all__ = [
    "DEFAULT_PALETTE_ENTRY",
    "NodeCategory",
    "PALETTE",
    "PaletteEntry",
    "Scene",
    "SceneBuilder",
    "SceneRenderer",
    "VisualEdge",
    "VisualNode",
    "display_name",
    "palette_for",
]
