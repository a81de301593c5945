"""Debounced scheduling on the running asyncio loop."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

Task = Callable[[], Awaitable[object]]


class Debouncer:
    """Run a coroutine function once the input has been quiet for ``delay_ms``.

    ``schedule()`` replaces any unfired task, so only the last call within the
    window runs. The task reads whatever state it needs when it fires.
    """

    def __init__(self, delay_ms: int = 500):
        self._delay = delay_ms / 1000
        self._handle: Optional[asyncio.TimerHandle] = None
        self._fn: Optional[Task] = None
        self._running: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def running(self) -> Optional[asyncio.Task]:
        return self._running

    def schedule(self, fn: Task) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._fn = fn
        self._handle = loop.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._fn = None

    def _take(self) -> Optional[Task]:
        fn = self._fn
        self._handle = None
        self._fn = None
        return fn

    def _fire(self) -> None:
        fn = self._take()
        if fn is None:
            return
        self._running = asyncio.ensure_future(fn())
        self._running.add_done_callback(self._done)

    def _done(self, task: asyncio.Task) -> None:
        if self._running is task:
            self._running = None
        if not task.cancelled() and task.exception() is not None:
            logger.error("Debounced task failed: %s", task.exception())

    async def flush(self) -> Optional[object]:
        """Run the pending task now and wait for it, or for one already running.

        Returns the task result, or None when nothing was pending.
        """
        fn = None
        if self._handle is not None:
            self._handle.cancel()
            fn = self._take()
        running = self._running
        if running is not None:
            await asyncio.wait([running])
        if fn is not None:
            return await fn()
        if running is not None and not running.cancelled():
            return running.result()
        return None
