"""Tests for scene assembly from entities, relationships and positions."""

from __future__ import annotations

from graphview.contracts import Entity, Position, Relationship
from graphview.scene import (
    DEFAULT_PALETTE_ENTRY,
    PALETTE,
    NodeCategory,
    SceneBuilder,
    display_name,
    palette_for,
)


def _entity(entity_id: str, label: str = "Document", **properties: str) -> Entity:
    return Entity(id=entity_id, label=label, properties=properties)


def test_build_resolves_edge_endpoints() -> None:
    entities = [_entity("A"), _entity("B", "Technology")]
    relationships = [Relationship(from_id="A", to_id="B", rel_type="MENTIONS")]
    positions = {"A": Position(10, 20), "B": Position(30, 40)}

    scene = SceneBuilder().build(entities, relationships, positions)

    assert scene.edge_count == 1
    edge = scene.edges[0]
    assert edge.source.id == "A"
    assert edge.target.id == "B"
    assert edge.source.position == Position(10, 20)
    assert edge.target.position == Position(30, 40)
    assert edge.rel_type == "MENTIONS"


def test_build_drops_dangling_relationships_without_raising() -> None:
    scene = SceneBuilder().build(
        [_entity("X")],
        [Relationship(from_id="X", to_id="missing"), Relationship(from_id="ghost", to_id="X")],
        {"X": Position(1, 1)},
    )

    assert scene.node_count == 1
    assert scene.edges == ()


def test_build_empty_input_gives_empty_scene() -> None:
    scene = SceneBuilder().build([], [], {})

    assert scene.is_empty
    assert scene.nodes == ()
    assert scene.edges == ()


def test_nodes_without_position_fall_back_to_centre() -> None:
    builder = SceneBuilder(fallback_position=Position(300, 200))

    scene = builder.build([_entity("A")], [], {})

    assert scene.nodes[0].position == Position(300, 200)


def test_build_preserves_input_order_and_first_duplicate() -> None:
    entities = [_entity("b"), _entity("a"), _entity("b", "Person")]
    relationships = [Relationship(from_id="a", to_id="b"), Relationship(from_id="b", to_id="a")]

    scene = SceneBuilder().build(entities, relationships, {})

    assert [node.id for node in scene.nodes] == ["b", "a"]
    assert scene.node("b").label == "Document"
    assert [(edge.from_id, edge.to_id) for edge in scene.edges] == [("a", "b"), ("b", "a")]


def test_scene_node_lookup() -> None:
    scene = SceneBuilder().build([_entity("A")], [], {})

    assert scene.node("A") is scene.nodes[0]
    assert scene.node("missing") is None
    assert scene.node(None) is None


def test_display_name_prefers_name_then_preview_then_id() -> None:
    assert display_name(_entity("id-1", name="Rust")) == "Rust"
    assert display_name(_entity("id-1", content_preview="Intro")) == "Intro"
    assert display_name(_entity("id-1", name="", content_preview="Intro")) == "Intro"
    assert display_name(_entity("id-1")) == "id-1"


def test_display_name_truncates_long_names() -> None:
    entity = _entity("doc", name="Knowledge Graphs in Practice")

    assert display_name(entity) == "Knowledge Gr…"
    assert display_name(_entity("doc", name="Exactly12chr")) == "Exactly12chr"
    assert display_name(entity, max_chars=4, ellipsis="...") == "Know..."


def test_visual_node_carries_palette_and_title() -> None:
    scene = SceneBuilder().build(
        [_entity("tech-1", "Technology", name="A very long technology name")],
        [],
        {},
    )
    node = scene.nodes[0]

    assert node.category is NodeCategory.TECHNOLOGY
    assert node.palette.color == "#3b82f6"
    assert node.title == "A very long technology name"
    assert node.display_name.endswith("…")


def test_palette_lookup_is_total() -> None:
    assert palette_for("Document").color == "#10b981"
    assert palette_for("Chunk").color == "#f59e0b"
    assert palette_for("Person").color == "#ec4899"
    assert palette_for("Field").color == "#06b6d4"
    assert palette_for("Domain").color == "#8b5cf6"
    assert palette_for("Unknown") is DEFAULT_PALETTE_ENTRY
    assert palette_for("") is DEFAULT_PALETTE_ENTRY
    assert set(PALETTE) == set(NodeCategory)
