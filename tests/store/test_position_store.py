"""Tests for drag override storage."""

from __future__ import annotations

from graphview.contracts import Position
from graphview.store import PositionStore, merge_positions


def test_merge_prefers_overrides() -> None:
    layout = {"a": Position(1, 1), "b": Position(2, 2)}
    overrides = {"b": Position(120, 80)}

    merged = merge_positions(layout, overrides)

    assert merged == {"a": Position(1, 1), "b": Position(120, 80)}
    assert layout["b"] == Position(2, 2)


def test_merge_includes_override_only_ids() -> None:
    merged = merge_positions({"a": Position(1, 1)}, {"gone": Position(5, 5)})

    assert merged["gone"] == Position(5, 5)


def test_set_and_get_override() -> None:
    store = PositionStore()
    store.set_override("doc-1", Position(120, 80))

    assert store.get_override("doc-1") == Position(120, 80)
    assert "doc-1" in store
    assert len(store) == 1
    assert store.get_override("missing") is None


def test_overrides_returns_a_copy() -> None:
    store = PositionStore({"a": Position(1, 1)})

    snapshot = store.overrides
    snapshot["b"] = Position(2, 2)

    assert "b" not in store


def test_prune_overrides_restricts_domain_to_current_ids() -> None:
    store = PositionStore({"a": Position(1, 1), "b": Position(2, 2), "c": Position(3, 3)})

    removed = store.prune_overrides(["a", "c", "z"])

    assert removed == 1
    assert set(store) <= {"a", "c", "z"}
    assert set(store) == {"a", "c"}


def test_clear_override() -> None:
    store = PositionStore({"a": Position(1, 1)})

    assert store.clear_override("a") is True
    assert store.clear_override("a") is False


def test_store_merge_uses_current_overrides() -> None:
    store = PositionStore()
    store.set_override("a", Position(9, 9))

    assert store.merge({"a": Position(1, 1), "b": Position(2, 2)}) == {
        "a": Position(9, 9),
        "b": Position(2, 2),
    }
