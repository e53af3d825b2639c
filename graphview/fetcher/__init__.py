"""Polling access to the knowledge API."""

from .client import KnowledgeAPIClient
from .data import DataFetcher, Resource, Snapshot, SnapshotListener
from .scheduler import PollJob, PollScheduler

__all__ = [
    "DataFetcher",
    "KnowledgeAPIClient",
    "PollJob",
    "PollScheduler",
    "Resource",
    "Snapshot",
    "SnapshotListener",
]
