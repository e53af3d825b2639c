"""Position override storage."""

from .positions import PositionStore, merge_positions

__all__ = ["PositionStore", "merge_positions"]
