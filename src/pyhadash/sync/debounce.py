"""Keyed debouncer.

One cancellable timer per key. Scheduling a key again cancels its pending
timer and starts a new one with the new callback, so a burst of requests
collapses into a single call carrying the last submitted work. Other keys
are never affected.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable

_logger = logging.getLogger(__name__)

DebouncedCall = Callable[[], Awaitable[None]]


class KeyedDebouncer:
    """Per-key cancel-and-reschedule debouncer on the running event loop.

    The debouncer guarantees at most one *scheduled* call per key. A call
    that already started is not cancelled by a later request, so two calls
    for the same key may be in flight at the same time.
    """

    def __init__(self, delay: float) -> None:
        self._delay = delay
        self._pending: dict[Hashable, tuple[asyncio.TimerHandle, DebouncedCall]] = {}
        self._running: set[asyncio.Task[None]] = set()

    @property
    def delay(self) -> float:
        return self._delay

    def is_pending(self, key: Hashable) -> bool:
        return key in self._pending

    @property
    def pending_keys(self) -> tuple[Hashable, ...]:
        return tuple(self._pending)

    def schedule(self, key: Hashable, call: DebouncedCall) -> None:
        """(Re)start the timer for *key*; *call* runs when it expires."""
        loop = asyncio.get_running_loop()
        self.cancel(key)
        handle = loop.call_later(self._delay, self._fire, key)
        self._pending[key] = (handle, call)

    def cancel(self, key: Hashable) -> bool:
        entry = self._pending.pop(key, None)
        if entry is None:
            return False
        entry[0].cancel()
        return True

    def cancel_all(self) -> None:
        for key in list(self._pending):
            self.cancel(key)

    def _fire(self, key: Hashable) -> None:
        entry = self._pending.pop(key, None)
        if entry is None:
            return
        self._start(key, entry[1])

    def _start(self, key: Hashable, call: DebouncedCall) -> asyncio.Task[None]:
        task = asyncio.ensure_future(call())
        self._running.add(task)

        def _done(finished: asyncio.Task[None]) -> None:
            self._running.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None:
                _logger.warning("Debounced call for %r failed: %s", key, exc, exc_info=exc)

        task.add_done_callback(_done)
        return task

    async def flush(self) -> None:
        """Run every pending call now and wait for all in-flight calls."""
        for key in list(self._pending):
            handle, call = self._pending.pop(key)
            handle.cancel()
            self._start(key, call)
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait until no debounced call is running."""
        while True:
            running = [task for task in self._running if not task.done()]
            if not running:
                return
            await asyncio.wait(running)
