from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any, Protocol


logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Timer facility the session runs on.

    - `every(period_ms, callback)`: call `callback` each period until the handle is cancelled.
    - `spawn(coro)`: run a detached coroutine; its result is never awaited by the caller.
    """

    def every(self, period_ms: int, callback: Callable[[], None]) -> TimerHandle: ...

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> None: ...


class _TaskHandle:
    def __init__(self, task: asyncio.Task[None]) -> None:
        self._task = task

    def cancel(self) -> None:
        self._task.cancel()


class AsyncioScheduler:
    """Scheduler backed by tasks on the running asyncio loop.

    Callbacks are plain functions, so each tick runs to completion before the
    loop can hand control to an input handler or another tick.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def every(self, period_ms: int, callback: Callable[[], None]) -> TimerHandle:
        if period_ms <= 0:
            raise ValueError("period_ms must be positive")
        task = asyncio.get_running_loop().create_task(self._run(period_ms / 1000, callback))
        self._track(task)
        return _TaskHandle(task)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> None:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._track(task)

    async def aclose(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, interval: float, callback: Callable[[], None]) -> None:
        loop = asyncio.get_running_loop()
        # Schedule against absolute deadlines so slow callbacks don't stretch the period.
        next_at = loop.time() + interval
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            next_at += interval
            callback()

    def _track(self, task: asyncio.Task[Any]) -> None:
        # Strong reference until done; the loop only keeps weak ones.
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background task %s failed", task.get_name(), exc_info=exc)
