"""Drag override storage merged against computed layouts."""
from __future__ import annotations

import logging
from typing import Collection, Dict, Iterator, Mapping, Optional

from graphview.contracts import Position

LOGGER = logging.getLogger(__name__)


def merge_positions(layout: Mapping[str, Position], overrides: Mapping[str, Position]) -> Dict[str, Position]:
    """Return the union of ``layout`` and ``overrides`` with overrides winning.

    Every id in ``layout`` appears in the result. Ids known only to
    ``overrides`` are included as well, so an entity that disappears and
    returns before the next prune reuses its previous drag position.
    """

    merged: Dict[str, Position] = dict(layout)
    merged.update(overrides)
    return merged


class PositionStore:
    """Own the user-made position overrides for the current view."""

    def __init__(self, overrides: Optional[Mapping[str, Position]] = None) -> None:
        self._overrides: Dict[str, Position] = dict(overrides or {})

    @property
    def overrides(self) -> Dict[str, Position]:
        """Return a copy of the stored overrides."""

        return dict(self._overrides)

    def get_override(self, entity_id: str) -> Optional[Position]:
        return self._overrides.get(entity_id)

    def set_override(self, entity_id: str, position: Position) -> None:
        """Pin ``entity_id`` at ``position``."""

        self._overrides[entity_id] = position

    def clear_override(self, entity_id: str) -> bool:
        """Remove a single override, returning whether one existed."""

        return self._overrides.pop(entity_id, None) is not None

    def prune_overrides(self, current_ids: Collection[str]) -> int:
        """Drop overrides for ids absent from ``current_ids``.

        Returns:
            int: Number of overrides removed.
        """

        allowed = set(current_ids)
        stale = [entity_id for entity_id in self._overrides if entity_id not in allowed]
        for entity_id in stale:
            del self._overrides[entity_id]
        if stale:
            LOGGER.debug("Pruned %d stale position overrides", len(stale))
        return len(stale)

    def merge(self, layout: Mapping[str, Position]) -> Dict[str, Position]:
        """Merge ``layout`` with the stored overrides."""

        return merge_positions(layout, self._overrides)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._overrides

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._overrides))

    def __len__(self) -> int:
        return len(self._overrides)


__all__ = ["PositionStore", "merge_positions"]
