"""Bounded timers for discovery retry, deferral, and debouncing.

Responsibilities:
- Provide a single `call_later` hook the applier uses for every suspension.
- Keep timing policy independent from the host event loop.

`ManualScheduler` runs callbacks against an injected clock and is what
tests and synchronous hosts drive; `AsyncioScheduler` adapts a running
asyncio loop.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import heapq
import itertools
from time import monotonic
from typing import Callable, Protocol


class TimerHandle(Protocol):
    """Handle of a scheduled callback."""

    def cancel(self) -> None:
        """Prevent the callback from running if it has not run yet."""


class Scheduler(Protocol):
    """Schedules callbacks after a delay in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run `callback` once, `delay` seconds from now."""


@dataclass(slots=True)
class ManualTimer:
    """Timer entry owned by `ManualScheduler`."""

    due_at: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        """Mark the timer as cancelled."""

        self.cancelled = True


@dataclass(slots=True)
class ManualScheduler:
    """Deterministic timer queue advanced explicitly by the host.

    Callbacks scheduled while running due timers are picked up in the same
    `advance` call when they fall inside the advanced window.
    """

    clock: Callable[[], float] = monotonic
    _offset: float = 0.0
    _queue: list[tuple[float, int, ManualTimer]] = field(default_factory=list)
    _sequence: itertools.count = field(default_factory=itertools.count)

    def now(self) -> float:
        """Return the scheduler time (injected clock plus advanced offset)."""

        return self.clock() + self._offset

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        """Queue a callback; negative delays run at the next `advance`."""

        timer = ManualTimer(due_at=self.now() + max(delay, 0.0), callback=callback)
        heapq.heappush(self._queue, (timer.due_at, next(self._sequence), timer))
        return timer

    def advance(self, seconds: float = 0.0) -> int:
        """Move time forward by `seconds` and run every due callback in order.

        Returns:
            Number of callbacks executed.
        """

        self._offset += max(seconds, 0.0)
        deadline = self.now()
        executed = 0
        while self._queue and self._queue[0][0] <= deadline:
            _, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            timer.callback()
            executed += 1
        return executed

    @property
    def pending_count(self) -> int:
        """Number of queued, not-cancelled timers."""

        return sum(1 for _, _, timer in self._queue if not timer.cancelled)


class AsyncioScheduler:
    """Adapter scheduling callbacks on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Bind to `loop`, or to the running loop at first use."""

        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        """Schedule through `loop.call_later`."""

        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(delay, 0.0), callback)
