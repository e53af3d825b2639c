"""Operational helpers for the graph view."""

from .api_health import KnowledgeAPIHealth, check_api_health

__all__ = ["KnowledgeAPIHealth", "check_api_health"]
