"""Tests for scroll_memory.state."""

from __future__ import annotations

import math

import pytest

from scroll_memory.state import EphemeralState, StateCache, round_scroll, states_equal


def test_round_scroll_keeps_four_decimals() -> None:
    assert round_scroll(12.345678) == 12.3457
    assert round_scroll(40) == 40.0
    assert round_scroll(0) == 0.0


@pytest.mark.parametrize("value", [None, math.nan, math.inf, "abc", "12.5", True, object()])
def test_round_scroll_rejects_non_numeric(value: object) -> None:
    assert round_scroll(value) is None


def test_states_equal_is_presence_based() -> None:
    assert states_equal(EphemeralState(), EphemeralState())
    assert states_equal(EphemeralState(), None)
    assert states_equal(EphemeralState(5.0), EphemeralState(5.0))
    assert not states_equal(EphemeralState(5.0), EphemeralState(6.0))
    assert not states_equal(EphemeralState(5.0), EphemeralState())
    assert not states_equal(None, EphemeralState(5.0))


def test_zero_is_a_real_position() -> None:
    assert not states_equal(EphemeralState(0.0), EphemeralState())
    assert EphemeralState(0.0).to_json() == {"scroll": 0.0}
    assert EphemeralState.from_json({"scroll": 0}).has_scroll


def test_from_json_rejects_bad_records() -> None:
    assert EphemeralState.from_json({}) == EphemeralState()
    with pytest.raises(ValueError):
        EphemeralState.from_json({"scroll": "nope"})
    with pytest.raises(ValueError):
        EphemeralState.from_json([1, 2])


@pytest.mark.parametrize("scroll", [-1.0, "12.5"])
def test_from_json_rejects_negative_or_string_offsets(scroll: object) -> None:
    with pytest.raises(ValueError):
        EphemeralState.from_json({"scroll": scroll})


@pytest.mark.parametrize("present", [True, False])
def test_rename_moves_entry(present: bool) -> None:
    cache = StateCache()
    if present:
        cache.set("notes/a.md", EphemeralState(12.5))
    cache.set("notes/b.md", EphemeralState(3.0))
    before = cache.get("notes/a.md")

    cache.rename("notes/a.md", "notes/b.md")

    assert cache.get("notes/b.md") == before
    assert "notes/a.md" not in cache


def test_rename_folder_moves_children() -> None:
    cache = StateCache(
        {
            "notes/a.md": EphemeralState(1.0),
            "notes/sub/b.md": EphemeralState(2.0),
            "notesX/c.md": EphemeralState(3.0),
        }
    )
    moved = cache.rename("notes", "archive", recursive=True)

    assert sorted(moved) == [("notes/a.md", "archive/a.md"), ("notes/sub/b.md", "archive/sub/b.md")]
    assert cache.get("archive/a.md") == EphemeralState(1.0)
    assert cache.get("archive/sub/b.md") == EphemeralState(2.0)
    assert cache.get("notesX/c.md") == EphemeralState(3.0)
    assert "notes/a.md" not in cache


@pytest.mark.parametrize("present", [True, False])
def test_delete_removes_entry(present: bool) -> None:
    cache = StateCache()
    if present:
        cache.set("notes/a.md", EphemeralState(1.0))
    cache.delete("notes/a.md")
    assert cache.get("notes/a.md") is None


def test_delete_folder_removes_children() -> None:
    cache = StateCache({"notes/a.md": EphemeralState(1.0), "other.md": EphemeralState(2.0)})
    assert cache.delete("notes", recursive=True) == ["notes/a.md"]
    assert len(cache) == 1


def test_shadow_is_independent_of_live_cache() -> None:
    cache = StateCache({"a.md": EphemeralState(1.0)})
    assert not cache.is_dirty()

    cache.set("a.md", EphemeralState(2.0))
    assert cache.shadow == {"a.md": EphemeralState(1.0)}
    assert cache.is_dirty()

    cache.mark_flushed(cache.entries)
    cache.set("b.md", EphemeralState(3.0))
    assert "b.md" not in cache.shadow


def test_serialize_matches_store_format() -> None:
    cache = StateCache({"notes/a.md": EphemeralState(12.5), "empty.md": EphemeralState()})
    assert cache.serialize() == '{"notes/a.md":{"scroll":12.5},"empty.md":{}}'
