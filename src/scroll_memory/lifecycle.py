"""Document open/rename/delete handling and the guarded restore sequence.

Restoring a position is a two step protocol: wait for the host to lay out the
document, then re-check that restoring is still wanted (the same document is
active and the host is not about to scroll to a link target) before applying.
"""

from __future__ import annotations

from loguru import logger

from .events import DeleteEvent, RenameEvent
from .host import DOCUMENT_VIEW_TYPE, Host
from .state import EphemeralState, LifecycleState, StateCache
from .timers import Timers


RESTORE_SETTLE_MS = 10


class LifecycleCoordinator:
    def __init__(
        self,
        host: Host,
        cache: StateCache,
        lifecycle: LifecycleState,
        timers: Timers,
        *,
        delay_after_open_ms: float = 100,
        restore_settle_ms: float = RESTORE_SETTLE_MS,
    ) -> None:
        self.host = host
        self.cache = cache
        self.lifecycle = lifecycle
        self.timers = timers
        self.delay_after_open_ms = delay_after_open_ms
        self.restore_settle_ms = restore_settle_ms
        self._generation = 0

    def on_open(self) -> None:
        self.timers.spawn(self.restore())

    def _already_handled(self) -> bool:
        view = self.host.most_recent_view()
        return view is not None and view.identity in self.lifecycle.open_view_identities

    def _refresh_open_views(self) -> None:
        self.lifecycle.open_view_identities = frozenset(
            view.identity for view in self.host.iter_views() if view.view_type == DOCUMENT_VIEW_TYPE
        )

    async def restore(self) -> None:
        """Restore the saved position of the active document, if any."""
        lc = self.lifecycle
        path = self.host.active_document_path()

        if path and lc.loading and lc.last_loaded_path == path:
            return
        if self._already_handled():
            # Switching back to a view that was restored before: follow it
            # without restoring again.
            if not lc.loading and lc.last_loaded_path != path:
                lc.reset(path)
            return
        self._refresh_open_views()

        self._generation += 1
        generation = self._generation
        lc.loading = True
        try:
            if lc.last_loaded_path == path:
                return
            lc.reset(path)

            saved = self.cache.get(path) if path else None
            if saved is not None:
                await self.timers.sleep(self.delay_after_open_ms)
                if self.host.has_flashing_marker():
                    logger.debug(f"Host is scrolling to a link target in {path}; not restoring")
                else:
                    await self.timers.sleep(self.restore_settle_ms)
                    self.apply(path, saved)

            if generation == self._generation:
                lc.last_state = saved
        finally:
            if generation == self._generation:
                lc.loading = False

    def apply(self, path: str, state: EphemeralState) -> bool:
        """Scroll the active view, but only if it still shows ``path``."""
        if self.host.active_document_path() != path:
            logger.debug(f"Active document changed before restoring {path}; skipped")
            return False
        if not state.has_scroll:
            return False
        self.host.set_scroll(state.scroll)
        logger.debug(f"Restored scroll position {state.scroll} for {path}")
        return True

    def on_rename(self, event: RenameEvent) -> None:
        moved = self.cache.rename(event.old_path, event.new_path, recursive=event.is_folder)
        lc = self.lifecycle
        if lc.last_loaded_path == event.old_path:
            lc.last_loaded_path = event.new_path
        elif event.is_folder and lc.last_loaded_path:
            old_prefix = event.old_path.rstrip("/") + "/"
            if lc.last_loaded_path.startswith(old_prefix):
                lc.last_loaded_path = event.new_path.rstrip("/") + "/" + lc.last_loaded_path[len(old_prefix):]
        if moved:
            logger.debug(f"Moved {len(moved)} scroll position(s): {event.old_path} -> {event.new_path}")

    def on_delete(self, event: DeleteEvent) -> None:
        removed = self.cache.delete(event.path, recursive=event.is_folder)
        if removed:
            logger.debug(f"Forgot {len(removed)} scroll position(s) under {event.path}")
