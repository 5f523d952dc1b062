"""
Event Emitter - Observer Registration and Delivery.

Handlers are called synchronously in subscription order. A handler that
raises is logged and does not prevent delivery to the others.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class EventEmitter:
    """Fixed set of named events with ordered handler lists."""

    def __init__(self, events: Iterable[str]) -> None:
        """
        Initialize emitter.

        Args:
            events: Names of the events that may be subscribed to
        """
        self._handlers: Dict[str, List[Handler]] = {name: [] for name in events}
        self._lock = threading.Lock()

    def _check(self, event: str) -> None:
        if event not in self._handlers:
            raise ValueError(
                f"Unknown event '{event}'. Known events: {sorted(self._handlers)}"
            )

    def on(self, event: str, handler: Handler) -> None:
        """
        Subscribe a handler.

        Raises:
            ValueError: If event is unknown
        """
        self._check(event)
        with self._lock:
            self._handlers[event].append(handler)

    def off(self, event: str, handler: Handler) -> bool:
        """
        Unsubscribe a handler.

        Returns:
            True if the handler was subscribed
        """
        self._check(event)
        with self._lock:
            try:
                self._handlers[event].remove(handler)
            except ValueError:
                return False
            return True

    def listener_count(self, event: str) -> int:
        self._check(event)
        with self._lock:
            return len(self._handlers[event])

    def emit(self, event: str, *args: Any) -> int:
        """
        Deliver an event to its handlers.

        Returns:
            Number of handlers called
        """
        self._check(event)
        with self._lock:
            handlers = list(self._handlers[event])

        for handler in handlers:
            try:
                handler(*args)
            except Exception:
                logger.exception(f"Handler for '{event}' event raised")
        return len(handlers)
