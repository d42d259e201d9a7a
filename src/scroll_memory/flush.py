"""Periodic and shutdown flushing of the cache to the durable store."""

from __future__ import annotations

from loguru import logger

from .state import StateCache
from .store import ScrollStore
from .timers import Timers


SAFE_DB_FLUSH_INTERVAL_MS = 5000


class FlushScheduler:
    def __init__(
        self,
        cache: StateCache,
        store: ScrollStore,
        timers: Timers,
        *,
        interval_ms: float = SAFE_DB_FLUSH_INTERVAL_MS,
    ) -> None:
        self.cache = cache
        self.store = store
        self.timers = timers
        self.interval_ms = interval_ms
        self.writes = 0

    def flush(self) -> bool:
        """Write the cache if it differs from the last flushed copy.

        Returns True when a write happened. Failures are logged and leave the
        shadow copy untouched so the next tick retries.
        """
        if not self.cache.is_dirty():
            return False

        snapshot = self.cache.entries
        text = self.cache.serialize()
        try:
            self.store.write(text)
        except OSError as e:
            logger.error(f"Failed to write scroll position database {self.store.db_file_name}: {e}")
            return False
        except Exception:
            logger.exception(f"Storage adapter failed writing {self.store.db_file_name}")
            return False

        self.cache.mark_flushed(snapshot)
        self.writes += 1
        logger.debug(f"Saved {len(snapshot)} scroll position(s) to {self.store.db_file_name}")
        return True

    async def run(self) -> None:
        while True:
            await self.timers.sleep(self.interval_ms)
            self.flush()

    def start(self) -> None:
        self.timers.spawn(self.run())
