"""Colour classification for entity labels."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping


class NodeCategory(str, Enum):
    """Entity categories with a dedicated palette entry."""

    DOCUMENT = "Document"
    TECHNOLOGY = "Technology"
    CHUNK = "Chunk"
    PERSON = "Person"
    FIELD = "Field"
    DOMAIN = "Domain"
    OTHER = "Other"

    @classmethod
    def classify(cls, label: str) -> "NodeCategory":
        """Return the category for ``label``; unknown labels map to ``OTHER``."""

        try:
            category = cls(label)
        except ValueError:
            return cls.OTHER
        return category


@dataclass(frozen=True)
class PaletteEntry:
    """Stroke/fill/text colours used to draw one node category."""

    color: str
    fill: str
    stroke: str
    fill_opacity: float = 0.2

    def to_dict(self) -> Dict[str, object]:
        return {
            "color": self.color,
            "fill": self.fill,
            "stroke": self.stroke,
            "fill_opacity": self.fill_opacity,
        }


DEFAULT_PALETTE_ENTRY = PaletteEntry(color="#64748b", fill="#64748b", stroke="#64748b")

PALETTE: Mapping[NodeCategory, PaletteEntry] = {
    NodeCategory.DOCUMENT: PaletteEntry(color="#10b981", fill="#10b981", stroke="#10b981"),
    NodeCategory.TECHNOLOGY: PaletteEntry(color="#3b82f6", fill="#3b82f6", stroke="#3b82f6"),
    NodeCategory.CHUNK: PaletteEntry(color="#f59e0b", fill="#f59e0b", stroke="#f59e0b"),
    NodeCategory.PERSON: PaletteEntry(color="#ec4899", fill="#ec4899", stroke="#ec4899"),
    NodeCategory.FIELD: PaletteEntry(color="#06b6d4", fill="#06b6d4", stroke="#06b6d4"),
    NodeCategory.DOMAIN: PaletteEntry(color="#8b5cf6", fill="#8b5cf6", stroke="#8b5cf6"),
    NodeCategory.OTHER: DEFAULT_PALETTE_ENTRY,
}

_missing = set(NodeCategory) - set(PALETTE)
if _missing:  # pragma: no cover - guards edits to the table above
    raise RuntimeError(f"Palette is missing categories: {sorted(item.value for item in _missing)}")


def palette_for(label: str) -> PaletteEntry:
    """Return the palette entry for an entity label."""

    return PALETTE[NodeCategory.classify(label)]


__all__ = ["DEFAULT_PALETTE_ENTRY", "NodeCategory", "PALETTE", "PaletteEntry", "palette_for"]
