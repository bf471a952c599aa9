"""Cooperative cancellation."""

from __future__ import annotations


class CancellationToken:
    """A flag polled between units of work; never interrupts an awaited call."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
