"""Turns bursts of scroll, wheel and key signals into cache updates."""

from __future__ import annotations

from loguru import logger

from .events import KeySignal
from .host import Host
from .state import EphemeralState, LifecycleState, StateCache, round_scroll, states_equal
from .timers import Debouncer, Timers


SCROLL_DEBOUNCE_MS = 50
KEY_SETTLE_MS = 10


class ChangeDetector:
    def __init__(
        self,
        host: Host,
        cache: StateCache,
        lifecycle: LifecycleState,
        timers: Timers,
        *,
        debounce_ms: float = SCROLL_DEBOUNCE_MS,
        key_settle_ms: float = KEY_SETTLE_MS,
    ) -> None:
        self.host = host
        self.cache = cache
        self.lifecycle = lifecycle
        self.timers = timers
        self.key_settle_ms = key_settle_ms
        self._debouncer = Debouncer(timers, debounce_ms, self.check_changed)
        self.evaluations = 0

    def on_scroll(self) -> None:
        self._debouncer.trigger()

    def on_key(self, signal: KeySignal) -> None:
        # Give the host a moment to scroll before joining the debounce chain.
        if signal.is_navigation:
            self.timers.call_later(self.key_settle_ms, self.on_scroll)

    def sample(self) -> EphemeralState:
        return EphemeralState(scroll=round_scroll(self.host.get_scroll()))

    def check_changed(self) -> None:
        self.evaluations += 1
        path = self.host.active_document_path()
        lc = self.lifecycle

        # Waiting for a document to finish loading.
        if not path or lc.last_loaded_path is None or path != lc.last_loaded_path or lc.loading:
            return

        current = self.sample()
        if lc.last_state is None:
            lc.last_state = current

        if current.has_scroll and not states_equal(current, lc.last_state):
            self.save(current)
            lc.last_state = current

    def save(self, state: EphemeralState) -> None:
        path = self.host.active_document_path()
        if path and path == self.lifecycle.last_loaded_path:
            self.cache.set(path, state)
            logger.trace(f"Scroll position for {path}: {state.scroll}")

    def cancel(self) -> None:
        self._debouncer.cancel()
