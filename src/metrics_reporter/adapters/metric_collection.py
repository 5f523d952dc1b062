"""
In-Memory Metric Collection.

A minimal metric collection with counters and gauges. Metrics are
created on first access and reported in creation order.
"""

from __future__ import annotations

from threading import Lock
from typing import Any, Callable, Dict, Optional, Union


class Counter:
    """Monotonic-by-convention integer counter."""

    metric_type = "counter"

    def __init__(self) -> None:
        self._count = 0
        self._lock = Lock()

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    def reset(self, count: int = 0) -> None:
        with self._lock:
            self._count = count

    def to_json(self) -> int:
        with self._lock:
            return self._count


class Gauge:
    """Value read from a callable at snapshot time."""

    metric_type = "gauge"

    def __init__(self, read_fn: Callable[[], Any]) -> None:
        self._read_fn = read_fn

    def to_json(self) -> Any:
        return self._read_fn()


Metric = Union[Counter, Gauge]


class InMemoryMetricCollection:
    """Named group of counters and gauges."""

    def __init__(self, name: Optional[str] = None) -> None:
        """
        Initialize collection.

        Args:
            name: Prefix for metric names when reported
        """
        self._name = name
        self._metrics: Dict[str, Metric] = {}
        self._lock = Lock()
        self._ended = False

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def ended(self) -> bool:
        return self._ended

    def counter(self, name: str) -> Counter:
        """Get or create a counter."""
        return self._get_or_create(name, Counter, Counter)

    def gauge(self, name: str, read_fn: Callable[[], Any]) -> Gauge:
        """Get or create a gauge reading its value from read_fn."""
        return self._get_or_create(name, Gauge, lambda: Gauge(read_fn))

    def _get_or_create(self, name: str, kind: type, factory: Callable[[], Metric]) -> Any:
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                metric = factory()
                self._metrics[name] = metric
            elif not isinstance(metric, kind):
                raise TypeError(
                    f"Metric '{name}' already exists as a {metric.metric_type}"
                )
            return metric

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot all metric values in creation order."""
        with self._lock:
            metrics = list(self._metrics.items())
        return {name: metric.to_json() for name, metric in metrics}

    def metric_types(self) -> Dict[str, str]:
        with self._lock:
            return {name: metric.metric_type for name, metric in self._metrics.items()}

    def end(self) -> None:
        """Mark the collection ended. Metrics stay readable."""
        self._ended = True
