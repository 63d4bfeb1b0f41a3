"""
Debounce Scheduler: trailing-edge only.

Holds the most recent value and hands it to a callback once `delay`
seconds pass with no newer value. Every push cancels and restarts
the timer. Nothing fires before the first push, and nothing fires on
the leading edge.

The coordinator runs two of these over the same input stream (fast
and slow tier). They share nothing, so restarting one never touches
the other.

Must be driven from inside a running asyncio event loop.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class DebounceScheduler(Generic[T]):

    def __init__(self, delay: float, callback: Callable[[T], None]):
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.delay = delay
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._value: Optional[T] = None
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: T) -> None:
        """Record `value` and restart the quiet period."""
        if self._handle is not None:
            self._handle.cancel()
        self._value = value
        self._idle.clear()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Drop the pending emission, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._idle.set()

    def flush(self) -> None:
        """Emit the pending value now instead of waiting."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()

    async def wait(self) -> None:
        """Wait until no emission is pending."""
        await self._idle.wait()

    def _fire(self) -> None:
        self._handle = None
        try:
            self._callback(self._value)  # type: ignore[arg-type]
        finally:
            self._idle.set()
