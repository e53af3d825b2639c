"""Exception hierarchy for the graphview engine."""
from __future__ import annotations

from typing import Optional


class GraphViewError(RuntimeError):
    """Base class for engine errors."""


class TransientFetchFailure(GraphViewError):
    """Raised when a poll of the knowledge API fails.

    The fetcher keeps the previous snapshot and flags the slice as degraded;
    the next successful poll clears the flag.
    """

    def __init__(self, resource: str, detail: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(f"Fetching {resource} failed: {detail}")
        self.resource = resource
        self.detail = detail
        self.status_code = status_code


class SeedFailure(GraphViewError):
    """Raised when the seed write call fails."""

    def __init__(self, detail: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(f"Seeding sample data failed: {detail}")
        self.detail = detail
        self.status_code = status_code


class TransformError(GraphViewError):
    """Raised when a screen-to-canvas transform cannot be inverted."""


__all__ = ["GraphViewError", "SeedFailure", "TransformError", "TransientFetchFailure"]
