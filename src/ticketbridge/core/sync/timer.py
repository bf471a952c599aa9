"""Periodic auto-sync timer."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

_LOG = logging.getLogger(__name__)


class AutoSyncTimer:
    """Runs *callback* every *interval_seconds* on the running event loop.

    ``stop`` never interrupts a tick in progress: the tick finishes against
    the state it started with and the loop exits afterwards.
    """

    def __init__(self, callback: Callable[[], Awaitable[object]], interval_seconds: float) -> None:
        self._callback = callback
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None
        self._stop: asyncio.Event | None = None
        self._retiring: set[asyncio.Task[None]] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done() and self._stop is not None and not self._stop.is_set()

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @interval_seconds.setter
    def interval_seconds(self, value: float) -> None:
        """Takes effect from the next start; a running loop keeps its interval."""
        self._interval = value

    def start(self) -> None:
        if self.running:
            return
        stop = asyncio.Event()
        self._stop = stop
        self._task = asyncio.get_running_loop().create_task(self._run(stop))
        _LOG.debug("auto-sync started (every %.0fs)", self._interval)

    def stop(self) -> None:
        if self._stop is not None:
            self._stop.set()
        if self._task is not None and not self._task.done():
            task = self._task
            self._retiring.add(task)
            task.add_done_callback(self._retiring.discard)
        self._stop = None
        self._task = None

    async def wait_stopped(self) -> None:
        """Wait for stopped loops to finish their in-flight tick."""
        if self._retiring:
            await asyncio.gather(*list(self._retiring), return_exceptions=True)

    def restart(self, interval_seconds: float | None = None) -> None:
        self.stop()
        if interval_seconds is not None:
            self._interval = interval_seconds
        self.start()

    async def _run(self, stop: asyncio.Event) -> None:
        while not stop.is_set():
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop.wait(), timeout=self._interval)
            if stop.is_set():
                break
            try:
                await self._callback()
            except Exception:
                _LOG.exception("auto-sync tick failed")
        _LOG.debug("auto-sync stopped")
