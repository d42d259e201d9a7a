"""Timer and task ownership on the asyncio loop.

Every delayed callback and background task goes through one :class:`Timers`
registry so teardown can cancel all of them at once.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

from loguru import logger


class Timers:
    def __init__(self) -> None:
        self._handles: set[asyncio.TimerHandle] = set()
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._handles) + len(self._tasks)

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle | None:
        """Run ``callback`` after ``delay_ms``; runs it now when no loop is running."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            callback()
            return None

        def _fire() -> None:
            self._handles.discard(handle)
            callback()

        handle = loop.call_later(max(delay_ms, 0) / 1000.0, _fire)
        self._handles.add(handle)
        return handle

    def cancel(self, handle: asyncio.TimerHandle | None) -> None:
        if handle is None:
            return
        handle.cancel()
        self._handles.discard(handle)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any] | None:
        """Run ``coro`` as a background task; runs it to completion when no loop is running."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(coro)
            return None
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(f"Background task failed: {task.get_name()}")

    async def sleep(self, delay_ms: float) -> None:
        await asyncio.sleep(max(delay_ms, 0) / 1000.0)

    def cancel_all(self) -> None:
        for handle in list(self._handles):
            handle.cancel()
        self._handles.clear()
        for task in list(self._tasks):
            task.cancel()

    async def drain(self) -> None:
        """Wait for cancelled tasks to finish unwinding."""
        tasks = list(self._tasks)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


class Debouncer:
    """Trailing-edge debounce: each trigger cancels and restarts the timer."""

    def __init__(self, timers: Timers, delay_ms: float, callback: Callable[[], None]) -> None:
        self.timers = timers
        self.delay_ms = delay_ms
        self.callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        self._handle = self.timers.call_later(self.delay_ms, self._fire)

    def _fire(self) -> None:
        self._handle = None
        self.callback()

    def cancel(self) -> None:
        if self._handle is not None:
            self.timers.cancel(self._handle)
            self._handle = None
