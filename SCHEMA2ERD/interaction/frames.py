"""Frame and timer scheduling for a host-driven event loop.

The host calls `FrameScheduler.tick(now_ms)` once per frame. Callbacks
requested during a tick run on the following tick, as with
`requestAnimationFrame`.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, List, Optional, Tuple


class TimerHandle:
    def __init__(self, due_ms: float, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

class FrameScheduler:
    def __init__(self, now_ms: float = 0.0):
        self.now_ms = now_ms
        self._frame_callbacks: List[Callable[[], None]] = []
        self._timers: List[Tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    @property
    def pending_frames(self) -> int:
        return len(self._frame_callbacks)

    def request(self, callback: Callable[[], None]) -> None:
        """Queue `callback` for the next tick."""
        self._frame_callbacks.append(callback)

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run `callback` on the first tick at or after now + delay."""
        handle = TimerHandle(self.now_ms + delay_ms, callback)
        heapq.heappush(self._timers, (handle.due_ms, next(self._counter), handle))
        return handle

    def tick(self, now_ms: Optional[float] = None) -> None:
        if now_ms is not None:
            self.now_ms = max(self.now_ms, now_ms)

        while self._timers and self._timers[0][0] <= self.now_ms:
            _, _, handle = heapq.heappop(self._timers)
            if not handle.cancelled:
                handle.callback()

        callbacks, self._frame_callbacks = self._frame_callbacks, []
        for callback in callbacks:
            callback()

class CoalescedFrame:
    """Collapses any number of requests within a frame into one run."""

    def __init__(self, scheduler: FrameScheduler, callback: Callable[[], None]):
        self.scheduler = scheduler
        self.callback = callback
        self.pending = False
        self.runs = 0

    def request(self) -> None:
        if self.pending:
            return
        self.pending = True
        self.scheduler.request(self._run)

    def _run(self) -> None:
        if not self.pending:
            return
        self.pending = False
        self.runs += 1
        self.callback()

    def cancel(self) -> None:
        self.pending = False
