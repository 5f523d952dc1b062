"""
Observability Manager - Structured Lifecycle Events and Reporter Self-Metrics.

The reporter ships other people's metrics; this module covers its own:
    - structlog event log (JSON lines or console) for lifecycle events
    - Flush cycle IDs, propagated via ContextVar into every log line
    - Running summaries of internal metrics (flush timings, batch sizes,
      probe failures)

Events are also kept in a bounded in-memory history for inspection.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

import structlog

from metrics_reporter.config.models import LoggingConfig

_cycle_id: ContextVar[Optional[str]] = ContextVar("cycle_id", default=None)


def get_cycle_id() -> Optional[str]:
    """Get current flush cycle ID from context."""
    return _cycle_id.get()


def set_cycle_id(cycle_id: Optional[str]) -> None:
    """Set flush cycle ID in context."""
    _cycle_id.set(cycle_id)


@dataclass
class MetricSummary:
    """Running summary of one internal metric."""

    type: str
    count: int = 0
    total: float = 0.0
    last: float = 0.0
    max: Optional[float] = None

    def add(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.last = value
        self.max = value if self.max is None else max(self.max, value)

    @property
    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0


class ObservabilityManager:
    """
    Structured logging and self-metrics for one reporter.

    Event types logged by MetricsReporter:
        reporter_starting, probe_failed, reporter_started,
        flush_completed, flush_failed, reporter_stopped
    """

    def __init__(
        self,
        service_name: str = "metrics_reporter",
        use_json: bool = True,
        log_level: int = logging.INFO,
        max_events: int = 1000,
    ) -> None:
        """
        Args:
            service_name: Added to every event as "service"
            use_json: Render JSON lines instead of console output
            log_level: Minimum level written by the structlog logger
            max_events: Size of the in-memory event history
        """
        self.service_name = service_name
        self.use_json = use_json
        self.log_level = log_level
        self._summaries: Dict[str, MetricSummary] = {}
        self._events: Deque[Dict[str, Any]] = deque(maxlen=max_events)
        self._lock = threading.Lock()

        self._setup_structlog()
        self._logger = structlog.get_logger(service_name)

    @classmethod
    def from_config(
        cls, config: LoggingConfig, service_name: str = "metrics_reporter"
    ) -> "ObservabilityManager":
        """Create a manager from the logging section of ReporterConfig."""
        return cls(
            service_name=service_name,
            use_json=config.json_output,
            log_level=config.level_number,
        )

    def _setup_structlog(self) -> None:
        renderer = (
            structlog.processors.JSONRenderer()
            if self.use_json
            else structlog.dev.ConsoleRenderer(colors=False)
        )
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso", utc=True),
                renderer,
            ],
            wrapper_class=structlog.make_filtering_bound_logger(self.log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=True,
        )

    # =========================================================================
    # Flush cycles
    # =========================================================================

    def begin_cycle(self) -> str:
        """Start a flush cycle: new ID, bound into context and log lines."""
        cycle_id = str(uuid.uuid4())
        set_cycle_id(cycle_id)
        structlog.contextvars.bind_contextvars(cycle_id=cycle_id)
        return cycle_id

    def end_cycle(self) -> None:
        """Unbind the flush cycle ID."""
        set_cycle_id(None)
        structlog.contextvars.unbind_contextvars("cycle_id")

    # =========================================================================
    # Events
    # =========================================================================

    def log_event(
        self,
        event_type: str,
        data: Optional[Dict[str, Any]] = None,
        level: str = "info",
    ) -> None:
        """
        Log a lifecycle event and keep it in the history.

        The current cycle ID is attached unless data already carries one.

        Args:
            event_type: e.g. "flush_completed"
            data: Event fields
            level: debug, info, warning or error
        """
        fields: Dict[str, Any] = {"service": self.service_name, **(data or {})}
        cycle_id = get_cycle_id()
        if cycle_id is not None:
            fields.setdefault("cycle_id", cycle_id)

        record = {
            "event_type": event_type,
            "recorded_at": datetime.now(timezone.utc).isoformat(),
            **fields,
        }
        with self._lock:
            self._events.append(record)

        emit = getattr(self._logger, level.lower(), self._logger.info)
        emit(event_type, **fields)

    def get_events(self, event_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """Events in the history, oldest first, optionally of one type."""
        with self._lock:
            return [
                dict(e)
                for e in self._events
                if event_type is None or e["event_type"] == event_type
            ]

    # =========================================================================
    # Self-metrics
    # =========================================================================

    def record_metric(self, name: str, value: float, metric_type: str = "gauge") -> None:
        """Add one observation to the summary of name."""
        with self._lock:
            summary = self._summaries.get(name)
            if summary is None:
                summary = self._summaries[name] = MetricSummary(type=metric_type)
            summary.add(value)

    def record_timing(self, name: str, duration_seconds: float) -> None:
        self.record_metric(name, duration_seconds, metric_type="timing")

    def record_count(self, name: str, value: int = 1) -> None:
        self.record_metric(name, float(value), metric_type="counter")

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Summaries by metric name (type, count, total, last, max, mean)."""
        with self._lock:
            return {
                name: {**asdict(summary), "mean": summary.mean}
                for name, summary in self._summaries.items()
            }

    def clear(self) -> None:
        """Forget all events and metric summaries."""
        with self._lock:
            self._summaries.clear()
            self._events.clear()
