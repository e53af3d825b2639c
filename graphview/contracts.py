"""Immutable data contracts exchanged with the knowledge API."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

LOGGER = logging.getLogger(__name__)


class _FrozenBaseModel(BaseModel):
    """Base model enforcing immutability after creation."""

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class Position:
    """Point in canvas coordinate space."""

    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


class Entity(_FrozenBaseModel):
    """Knowledge-graph entity as served by the graph endpoint."""

    id: str
    label: str = Field("", description="Category tag such as Document or Technology.")
    properties: Dict[str, str] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def _stringify_properties(cls, value: object) -> Dict[str, str]:
        """Coerce property values to strings while preserving key order."""

        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("entity properties must be a mapping")
        return {str(key): "" if item is None else str(item) for key, item in value.items()}


class Relationship(_FrozenBaseModel):
    """Directed edge between two entity identifiers."""

    from_id: str
    to_id: str
    rel_type: str = Field("")


class GraphData(_FrozenBaseModel):
    """Snapshot of the graph endpoint payload."""

    entities: List[Entity] = Field(default_factory=list)
    relationships: List[Relationship] = Field(default_factory=list)

    @field_validator("entities")
    @classmethod
    def _drop_blank_ids(cls, value: List[Entity]) -> List[Entity]:
        """Skip entities whose identifier is blank; edges to them dangle."""

        kept = [entity for entity in value if entity.id.strip()]
        if len(kept) != len(value):
            LOGGER.warning("Dropped %d entities with a blank id", len(value) - len(kept))
        return kept

    @property
    def entity_ids(self) -> List[str]:
        return [entity.id for entity in self.entities]


class KnowledgeStats(_FrozenBaseModel):
    """Aggregate counts reported by the stats endpoint."""

    documents: int = Field(0, ge=0)
    entities: int = Field(0, ge=0)
    relationships: int = Field(0, ge=0)


class DocumentItem(_FrozenBaseModel):
    """Document reference listed by the documents endpoint."""

    doc_id: str = Field(..., min_length=1)
    content: Optional[str] = None

    def snippet(self, limit: int) -> str:
        """Return the leading ``limit`` characters of the content."""

        return (self.content or "")[:limit]


class DocumentList(_FrozenBaseModel):
    """Documents payload with the server-side count."""

    documents: List[DocumentItem] = Field(default_factory=list)
    count: int = Field(0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _default_count(cls, data: object) -> object:
        if isinstance(data, dict) and "count" not in data:
            documents = data.get("documents") or []
            return {**data, "count": len(documents)}
        return data


class SeedResult(_FrozenBaseModel):
    """Response returned by the seed endpoint."""

    status: str = Field("seeded")
    documents_ingested: int = Field(0, ge=0)
    message: str = Field("")


__all__ = [
    "DocumentItem",
    "DocumentList",
    "Entity",
    "GraphData",
    "KnowledgeStats",
    "Position",
    "Relationship",
    "SeedResult",
]
