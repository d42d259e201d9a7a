"""Tests for scroll_memory.flush."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from scroll_memory.flush import FlushScheduler
from scroll_memory.state import EphemeralState, StateCache
from scroll_memory.store import LocalStorageAdapter, ScrollStore
from scroll_memory.timers import Timers


class CountingAdapter(LocalStorageAdapter):
    def __init__(self, root: Path) -> None:
        super().__init__(root)
        self.writes = 0
        self.fail = False
        self.broken_writes = 0

    def write(self, path: str, data: str) -> None:
        if self.fail:
            raise PermissionError(f"read-only: {path}")
        if self.broken_writes:
            self.broken_writes -= 1
            raise RuntimeError("adapter not ready")
        self.writes += 1
        super().write(path, data)


def _make(tmp_path: Path, interval_ms: float = 5000) -> tuple[CountingAdapter, StateCache, FlushScheduler]:
    adapter = CountingAdapter(tmp_path)
    store = ScrollStore(adapter, "state/positions.json")
    cache = store.load_cache()
    return adapter, cache, FlushScheduler(cache, store, Timers(), interval_ms=interval_ms)


def test_flush_twice_writes_once(tmp_path: Path) -> None:
    adapter, cache, flusher = _make(tmp_path)
    cache.set("notes/a.md", EphemeralState(40.0))

    assert flusher.flush() is True
    assert flusher.flush() is False
    assert adapter.writes == 1

    payload = json.loads((tmp_path / "state" / "positions.json").read_text(encoding="utf-8"))
    assert payload == {"notes/a.md": {"scroll": 40.0}}


def test_clean_cache_does_no_io(tmp_path: Path) -> None:
    adapter, cache, flusher = _make(tmp_path)
    assert flusher.flush() is False
    assert adapter.writes == 0
    assert not (tmp_path / "state").exists()


def test_failed_write_is_retried_next_time(tmp_path: Path) -> None:
    adapter, cache, flusher = _make(tmp_path)
    cache.set("a.md", EphemeralState(1.0))
    adapter.fail = True

    assert flusher.flush() is False
    assert cache.is_dirty()
    assert cache.shadow == {}

    adapter.fail = False
    assert flusher.flush() is True
    assert not cache.is_dirty()


def test_changes_after_snapshot_stay_dirty(tmp_path: Path) -> None:
    adapter, cache, flusher = _make(tmp_path)
    cache.set("a.md", EphemeralState(1.0))
    flusher.flush()
    cache.set("a.md", EphemeralState(2.0))
    assert cache.shadow == {"a.md": EphemeralState(1.0)}
    assert cache.is_dirty()


def test_periodic_tick_flushes(tmp_path: Path) -> None:
    async def scenario() -> int:
        adapter, cache, flusher = _make(tmp_path, interval_ms=20)
        flusher.start()
        cache.set("a.md", EphemeralState(3.0))
        await asyncio.sleep(0.1)
        flusher.timers.cancel_all()
        await flusher.timers.drain()
        return adapter.writes

    assert asyncio.run(scenario()) == 1


def test_periodic_tick_survives_adapter_errors(tmp_path: Path) -> None:
    async def scenario() -> tuple[int, int]:
        adapter, cache, flusher = _make(tmp_path, interval_ms=20)
        adapter.broken_writes = 1
        flusher.start()
        cache.set("a.md", EphemeralState(3.0))
        await asyncio.sleep(0.2)
        running = flusher.timers.pending
        flusher.timers.cancel_all()
        await flusher.timers.drain()
        return adapter.writes, running

    writes, running = asyncio.run(scenario())
    assert writes == 1
    assert running == 1
    payload = json.loads((tmp_path / "state" / "positions.json").read_text(encoding="utf-8"))
    assert payload == {"a.md": {"scroll": 3.0}}
