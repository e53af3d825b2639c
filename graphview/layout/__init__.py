"""Initial layout computation for graph scenes."""

from .grid import GridShape, IncrementalLayout, LayoutStrategy, compute_initial_layout, grid_shape

__all__ = [
    "GridShape",
    "IncrementalLayout",
    "LayoutStrategy",
    "compute_initial_layout",
    "grid_shape",
]
