"""
Clock Protocol.

Injectable time source used by the scheduler and the serializer.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class TimerHandle(Protocol):
    """Handle of a pending timer."""

    def cancel(self) -> None:
        """Prevent the timer from firing. No-op if already fired."""
        ...


@runtime_checkable
class Clock(Protocol):
    """Abstract time source."""

    def now(self) -> float:
        """Current time as epoch seconds."""
        ...

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> TimerHandle:
        """
        Run callback once after delay_seconds.

        Returns:
            Handle that cancels the timer
        """
        ...
