from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Protocol


@dataclass
class TimerHandle:
    deadline_ms: int
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


@dataclass
class FrameScheduler:
    """Cooperative timer queue driven by elapsed milliseconds.

    Nothing runs on its own: the owner calls `advance` from its frame loop
    (or a test calls it directly). Callbacks fire in deadline order, ties in
    scheduling order, and may schedule further timers.
    """

    now_ms: int = 0
    _queue: list[tuple[int, int, TimerHandle]] = field(default_factory=list)
    _seq: itertools.count = field(default_factory=itertools.count)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(deadline_ms=self.now_ms + max(0, delay_ms), callback=callback)
        heapq.heappush(self._queue, (handle.deadline_ms, next(self._seq), handle))
        return handle

    def advance(self, elapsed_ms: int) -> int:
        """Move time forward, firing due timers. Returns how many fired."""
        target = self.now_ms + max(0, elapsed_ms)
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            deadline, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now_ms = deadline
            handle.cancelled = True
            handle.callback()
            fired += 1
        self.now_ms = target
        return fired

    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)
