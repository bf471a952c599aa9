"""In-process event bus for sync observers (status bar, notices, CLI)."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

_LOG = logging.getLogger(__name__)

SYNC_COMPLETE = "sync:complete"

EventHandler = Callable[[Any], Awaitable[None] | None]


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._pending: set[asyncio.Task[None]] = set()

    def on(self, event: str, handler: EventHandler) -> Callable[[], None]:
        handlers = self._handlers.setdefault(event, [])
        if handler not in handlers:
            handlers.append(handler)
        return lambda: self.off(event, handler)

    def off(self, event: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def once(self, event: str, handler: EventHandler) -> Callable[[], None]:
        async def wrapper(payload: Any) -> None:
            self.off(event, wrapper)
            result = handler(payload)
            if inspect.isawaitable(result):
                await result

        return self.on(event, wrapper)

    async def emit(self, event: str, payload: Any) -> None:
        """Run every handler for *event* in registration order."""
        for handler in list(self._handlers.get(event, ())):
            result = handler(payload)
            if inspect.isawaitable(result):
                await result

    def publish(self, event: str, payload: Any) -> None:
        """Fire-and-forget :meth:`emit`; handler failures are logged, never raised."""
        if not self._handlers.get(event):
            return
        task = asyncio.get_running_loop().create_task(self.emit(event, payload))
        self._pending.add(task)
        task.add_done_callback(self._on_published)

    def _on_published(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _LOG.warning("event handler failed: %s", exc)

    async def drain(self) -> None:
        """Wait for published events still in flight."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def clear(self) -> None:
        self._handlers.clear()
