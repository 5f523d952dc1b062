"""
Metric Collection Protocol.

A collection is an externally owned container of named metrics
(counters, gauges, meters, ...). The reporter only reads point-in-time
snapshots from it and finalizes it on stop.

Design Notes:
    - to_dict() order is the order records appear in a batch
    - Values are numbers or mappings of field name to number
    - end() releases timers/resources owned by the collection
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class MetricCollection(Protocol):
    """Abstract interface for a metric collection."""

    @property
    def name(self) -> Optional[str]:
        """Prefix for metric names, or None for bare names."""
        ...

    def to_dict(self) -> Mapping[str, Any]:
        """
        Snapshot current metric values.

        Returns:
            Ordered mapping of metric name to value
        """
        ...

    def end(self) -> None:
        """Release resources owned by the collection."""
        ...
