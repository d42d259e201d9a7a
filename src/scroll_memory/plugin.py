"""Wires the detector, coordinator and flush loop to a host and a store."""

from __future__ import annotations

from loguru import logger

from .config import ScrollMemoryConfig
from .detector import ChangeDetector
from .events import (
    DeleteEvent,
    Event,
    KeySignal,
    OpenEvent,
    QuitEvent,
    RenameEvent,
    ScrollSignal,
    WheelSignal,
)
from .flush import FlushScheduler
from .host import Host
from .lifecycle import LifecycleCoordinator
from .state import LifecycleState, StateCache
from .store import ScrollStore, StorageAdapter
from .timers import Timers


class ScrollMemory:
    """Remembers the scroll position of every document opened in a host."""

    def __init__(self, host: Host, storage: StorageAdapter, config: ScrollMemoryConfig | None = None) -> None:
        self.host = host
        self.config = config or ScrollMemoryConfig()
        self.store = ScrollStore(storage, self.config.db_file_name)
        self.timers = Timers()
        self.lifecycle = LifecycleState()
        self.cache = StateCache()
        self.detector: ChangeDetector | None = None
        self.coordinator: LifecycleCoordinator | None = None
        self.flusher: FlushScheduler | None = None
        self.running = False

    def _build(self, cache: StateCache) -> None:
        self.cache = cache
        self.detector = ChangeDetector(self.host, cache, self.lifecycle, self.timers)
        self.coordinator = LifecycleCoordinator(
            self.host,
            cache,
            self.lifecycle,
            self.timers,
            delay_after_open_ms=self.config.delay_after_file_opening,
        )
        self.flusher = FlushScheduler(cache, self.store, self.timers, interval_ms=self.config.save_timer)

    async def start(self) -> None:
        self._build(self.store.load_cache())
        self.running = True
        self.flusher.start()
        logger.info(f"Tracking scroll positions in {self.store.db_file_name}")
        await self.coordinator.restore()

    async def stop(self, *, flush: bool = True) -> None:
        if not self.running:
            return
        self.running = False
        self.timers.cancel_all()
        await self.timers.drain()
        if flush:
            self.flusher.flush()

    def dispatch(self, event: Event) -> None:
        if not self.running:
            logger.debug(f"Ignoring {type(event).__name__}: not started")
            return

        if isinstance(event, OpenEvent):
            self.coordinator.on_open()
        elif isinstance(event, RenameEvent):
            self.coordinator.on_rename(event)
        elif isinstance(event, DeleteEvent):
            self.coordinator.on_delete(event)
        elif isinstance(event, QuitEvent):
            self.flusher.flush()
        elif isinstance(event, (ScrollSignal, WheelSignal)):
            self.detector.on_scroll()
        elif isinstance(event, KeySignal):
            self.detector.on_key(event)
        else:
            raise TypeError(f"Unsupported event: {event!r}")
