# poemfinder/core/debouncer.py

import asyncio
import logging
from typing import Any, Callable, Optional, Set


class Debouncer:
    """
    Timer-based coalescing of rapid value changes.

    Every `submit` restarts the timer. When it fires, the settled value is
    compared with the last dispatched one and the callback runs only if it
    differs, so a burst of edits yields at most one dispatch. Coroutine
    callbacks are scheduled as tasks on the running loop.
    """

    def __init__(self, delay: float, callback: Callable[[Any], Any]):
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self.delay = delay
        self.callback = callback
        self.logger = logging.getLogger(self.__class__.__name__)

        self._handle: Optional[asyncio.TimerHandle] = None
        self._has_dispatched = False
        self._last_dispatched: Any = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True while a submitted value is waiting for the timer"""
        return self._handle is not None

    def submit(self, value: Any) -> None:
        """Restart the timer with `value`. Must be called from the event loop."""
        loop = asyncio.get_running_loop()
        self.cancel()
        self._handle = loop.call_later(self.delay, self._fire, value)

    def cancel(self) -> None:
        """Drop the pending value, if any"""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, value: Any) -> None:
        self._handle = None
        if self._has_dispatched and value == self._last_dispatched:
            self.logger.debug(f"Settled value unchanged, skipping dispatch: {value!r}")
            return

        self._has_dispatched = True
        self._last_dispatched = value
        result = self.callback(value)
        if asyncio.iscoroutine(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        """Wait for dispatched coroutine callbacks to finish"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def settle(self) -> None:
        """Wait for the pending timer to fire, then for its callback"""
        while self._handle is not None:
            await asyncio.sleep(self.delay / 2)
        await self.wait_idle()
