"""
Clock Implementations.

WallClock runs timers on daemon threads. ManualClock keeps virtual time
that only moves when advance() is called, firing due timers in order.
"""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional


class WallClock:
    """Real time source backed by threading.Timer."""

    def now(self) -> float:
        return time.time()

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> threading.Timer:
        timer = threading.Timer(max(delay_seconds, 0.0), callback)
        timer.daemon = True
        timer.start()
        return timer


@dataclass(order=True)
class ManualTimer:
    """Timer armed on a ManualClock."""

    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualClock:
    """
    Virtual time source.

    Time stands still until advance() is called. Timers due within the
    advanced window fire in due-time order (ties in arming order), and
    now() reports each timer's due time while its callback runs, so
    timers armed from a callback are relative to that moment.
    """

    def __init__(self, start: float = 0.0) -> None:
        """
        Initialize manual clock.

        Args:
            start: Initial time as epoch seconds
        """
        self._now = start
        self._timers: List[ManualTimer] = []
        self._seq = itertools.count()
        self._lock = threading.RLock()

    def now(self) -> float:
        with self._lock:
            return self._now

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> ManualTimer:
        with self._lock:
            timer = ManualTimer(
                due=self._now + max(delay_seconds, 0.0),
                seq=next(self._seq),
                callback=callback,
            )
            heapq.heappush(self._timers, timer)
            return timer

    def advance(self, seconds: float) -> int:
        """
        Move time forward, firing every timer that falls due.

        Args:
            seconds: Amount of virtual time to advance (>= 0)

        Returns:
            Number of timers fired
        """
        if seconds < 0:
            raise ValueError(f"Cannot move time backwards ({seconds})")

        with self._lock:
            target = self._now + seconds

        fired = 0
        while True:
            timer = self._pop_due(target)
            if timer is None:
                break
            timer.callback()
            fired += 1

        with self._lock:
            self._now = target
        return fired

    def _pop_due(self, target: float) -> Optional[ManualTimer]:
        """Pop the next live timer due at or before target."""
        with self._lock:
            while self._timers and self._timers[0].due <= target:
                timer = heapq.heappop(self._timers)
                if timer.cancelled:
                    continue
                self._now = timer.due
                return timer
            return None

    @property
    def pending_count(self) -> int:
        """Number of armed, not cancelled timers."""
        with self._lock:
            return sum(1 for t in self._timers if not t.cancelled)
