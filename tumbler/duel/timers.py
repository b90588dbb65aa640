"""
Cancelable timers on the running asyncio loop.

A TimerSlot holds at most one pending callback. Scheduling into a slot
cancels whatever was pending there first, which is what keeps a stale
round from writing into a newer one.
"""

import asyncio
from typing import Any, Callable, Optional


class TimerSlot:
    """Single-occupancy wrapper around ``loop.call_later``/``call_at``."""

    def __init__(self, name: str = "timer"):
        self.name = name
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None and not self._handle.cancelled()

    def schedule(self, delay: float, callback: Callable[..., Any], *args: Any) -> None:
        """Run callback after delay seconds, replacing any pending callback."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(max(0.0, delay), self._fire, callback, args)

    def schedule_at(self, when: float, callback: Callable[..., Any], *args: Any) -> None:
        """Run callback at loop time ``when``, replacing any pending callback."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_at(when, self._fire, callback, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: Callable[..., Any], args: tuple) -> None:
        self._handle = None
        callback(*args)


def loop_time() -> float:
    """Current time on the running loop's clock."""
    return asyncio.get_running_loop().time()


__all__ = ["TimerSlot", "loop_time"]
