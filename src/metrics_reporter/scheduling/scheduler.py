"""
Scheduler - Retrying and Recurring Timers.

Provides two independent schedules driven by one injectable clock:
    - Retrying: run now, re-run after an interval until the action succeeds
    - Recurring: run now, then at a fixed rate until cancelled

Actions are asynchronous: each invocation receives a ``done(success)``
callback and may call it inline or later from another thread. The
scheduler never interprets failures beyond that boolean.

Design Notes:
    - Cancellation bumps a generation counter; late done() calls from a
      cancelled generation are ignored
    - A recurring tick that arrives while the previous run has not
      reported done is skipped, so runs never overlap
    - Actions are always invoked outside the scheduler lock
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Union

from metrics_reporter.domain.value_objects import TimeUnit, to_seconds
from metrics_reporter.interfaces.clock import Clock, TimerHandle
from metrics_reporter.scheduling.clock import WallClock

logger = logging.getLogger(__name__)

DoneCallback = Callable[[bool], None]
Action = Callable[[DoneCallback], None]


@dataclass
class _ScheduleState:
    """Mutable state of one schedule."""

    name: str
    generation: int = 0
    timer: Optional[TimerHandle] = None
    in_flight: bool = False

    @property
    def is_active(self) -> bool:
        return self.timer is not None or self.in_flight


class Scheduler:
    """
    Time-based triggering for one retrying and one recurring action.

    Scheduling a new action of either kind replaces the previous one of
    the same kind.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        """
        Initialize scheduler.

        Args:
            clock: Time source (defaults to WallClock)
        """
        self.clock = clock or WallClock()
        self._lock = threading.RLock()
        self._retrying = _ScheduleState("retrying")
        self._recurring = _ScheduleState("recurring")

    # =========================================================================
    # Retrying schedule
    # =========================================================================

    def schedule_retrying(
        self,
        action: Action,
        interval: Union[int, float],
        unit: Union[TimeUnit, str] = TimeUnit.SECONDS,
    ) -> None:
        """
        Run action now and again after interval until it succeeds.

        Args:
            action: Called with done(success)
            interval: Delay between a failure and the next attempt
            unit: Unit of interval

        Raises:
            ValueError: If interval is not positive
        """
        seconds = to_seconds(interval, unit)
        with self._lock:
            self._cancel(self._retrying)
            generation = self._retrying.generation
        self._run_retrying(action, seconds, generation)

    def _run_retrying(self, action: Action, seconds: float, generation: int) -> None:
        with self._lock:
            if generation != self._retrying.generation:
                return
            self._retrying.timer = None
            self._retrying.in_flight = True

        done = self._retrying_done(action, seconds, generation)
        try:
            action(done)
        except Exception:
            logger.exception("Retrying action raised, treating as failure")
            done(False)

    def _retrying_done(
        self, action: Action, seconds: float, generation: int
    ) -> DoneCallback:
        reported = False

        def done(success: bool) -> None:
            nonlocal reported
            with self._lock:
                if reported or generation != self._retrying.generation:
                    return
                reported = True
                self._retrying.in_flight = False
                if success:
                    return
                logger.debug(f"Retrying action failed, next attempt in {seconds}s")
                self._retrying.timer = self.clock.call_later(
                    seconds,
                    lambda: self._run_retrying(action, seconds, generation),
                )

        return done

    def cancel_retrying(self) -> None:
        """Cancel the retrying schedule."""
        with self._lock:
            self._cancel(self._retrying)

    # =========================================================================
    # Recurring schedule
    # =========================================================================

    def schedule_recurring(
        self,
        action: Action,
        interval: Union[int, float],
        unit: Union[TimeUnit, str] = TimeUnit.SECONDS,
    ) -> None:
        """
        Run action now and then every interval until cancelled.

        Args:
            action: Called with done(success); success is not interpreted
            interval: Fixed period between runs
            unit: Unit of interval

        Raises:
            ValueError: If interval is not positive
        """
        seconds = to_seconds(interval, unit)
        with self._lock:
            self._cancel(self._recurring)
            generation = self._recurring.generation
        self._tick(action, seconds, generation)

    def _tick(self, action: Action, seconds: float, generation: int) -> None:
        with self._lock:
            if generation != self._recurring.generation:
                return
            self._recurring.timer = self.clock.call_later(
                seconds, lambda: self._tick(action, seconds, generation)
            )
            if self._recurring.in_flight:
                logger.warning("Previous recurring run still in flight, skipping tick")
                return
            self._recurring.in_flight = True

        done = self._recurring_done(generation)
        try:
            action(done)
        except Exception:
            logger.exception("Recurring action raised")
            done(False)

    def _recurring_done(self, generation: int) -> DoneCallback:
        reported = False

        def done(success: bool) -> None:
            nonlocal reported
            with self._lock:
                if reported or generation != self._recurring.generation:
                    return
                reported = True
                self._recurring.in_flight = False

        return done

    def cancel_recurring(self) -> None:
        """Cancel the recurring schedule."""
        with self._lock:
            self._cancel(self._recurring)

    # =========================================================================
    # Shared
    # =========================================================================

    def cancel_all(self) -> None:
        """Cancel both schedules. In-flight runs finish but are ignored."""
        with self._lock:
            self._cancel(self._retrying)
            self._cancel(self._recurring)

    def _cancel(self, state: _ScheduleState) -> None:
        state.generation += 1
        if state.timer is not None:
            state.timer.cancel()
            state.timer = None
        if state.in_flight:
            logger.debug(f"Cancelled {state.name} schedule with a run in flight")
        state.in_flight = False

    @property
    def retrying_active(self) -> bool:
        """True while a retry is pending or an attempt is in flight."""
        with self._lock:
            return self._retrying.is_active

    @property
    def recurring_active(self) -> bool:
        """True while the recurring schedule is armed."""
        with self._lock:
            return self._recurring.is_active
