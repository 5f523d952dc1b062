"""
Snapshot Serializer - Deterministic Registry-to-Batch Transform.

For each registered collection (in registry order) and each of its
metrics (in the collection's own order), one WriteRecord is produced.
The batch target is a time-partitioned name derived from the clock,
e.g. ``metrics-2024.12.15``.

Accepted values:
    - int / float (bool and non-finite numbers are rejected)
    - mapping of field name to such numbers; None fields are dropped

Anything else raises SerializationError for the whole snapshot.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from metrics_reporter.domain.entities import Batch, MetricValue, WriteRecord
from metrics_reporter.domain.errors import SerializationError
from metrics_reporter.interfaces.clock import Clock
from metrics_reporter.registry.collection_registry import CollectionEntry
from metrics_reporter.scheduling.clock import WallClock

DEFAULT_METRIC_TYPE = "metric"


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class SnapshotSerializer:
    """Converts registry entries into a Batch."""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        index_prefix: str = "metrics",
        date_format: str = "%Y.%m.%d",
    ) -> None:
        """
        Initialize serializer.

        Args:
            clock: Time source for record timestamps and the target
            index_prefix: Leading part of the target name
            date_format: strftime format of the time partition
        """
        self._clock = clock or WallClock()
        self.index_prefix = index_prefix
        self.date_format = date_format

    def target_for(self, timestamp: datetime) -> str:
        """Target name of the partition containing timestamp."""
        return f"{self.index_prefix}-{timestamp.strftime(self.date_format)}"

    def snapshot(self, entries: Sequence[CollectionEntry]) -> Batch:
        """
        Serialize the current state of all entries.

        Args:
            entries: Registry entries, in registry order

        Returns:
            Batch with one record per metric; empty if there are none

        Raises:
            SerializationError: If any metric value is malformed
        """
        timestamp = datetime.fromtimestamp(self._clock.now(), tz=timezone.utc)
        records: List[WriteRecord] = []
        for entry in entries:
            records.extend(self._serialize_entry(entry, timestamp))
        return Batch(target=self.target_for(timestamp), records=records)

    def _serialize_entry(
        self, entry: CollectionEntry, timestamp: datetime
    ) -> List[WriteRecord]:
        collection = entry.collection
        try:
            metrics = collection.to_dict()
            if not isinstance(metrics, Mapping):
                raise TypeError(
                    f"to_dict() returned {type(metrics).__name__}, expected a mapping"
                )
            items = list(metrics.items())
            types = self._metric_types(collection)
        except Exception as e:
            raise SerializationError(
                f"Snapshot of collection '{entry.label}' failed: {e}"
            ) from e

        records: List[WriteRecord] = []
        for metric_name, value in items:
            if not isinstance(metric_name, str):
                raise SerializationError(
                    f"Collection '{entry.label}' has non-string metric name "
                    f"{metric_name!r}",
                    metric_name=entry.qualify(str(metric_name)),
                )
            name = entry.qualify(metric_name)
            coerced = self._coerce_value(name, value)
            try:
                records.append(
                    WriteRecord(
                        name=name,
                        value=coerced,
                        metric_type=types.get(metric_name, DEFAULT_METRIC_TYPE),
                        timestamp=timestamp,
                    )
                )
            except Exception as e:
                raise SerializationError(
                    f"Metric '{name}' could not be serialized: {e}",
                    metric_name=name,
                ) from e
        return records

    def _metric_types(self, collection: Any) -> Mapping[str, str]:
        metric_types = getattr(collection, "metric_types", None)
        if metric_types is None:
            return {}
        return metric_types()

    def _coerce_value(self, name: str, value: Any) -> MetricValue:
        if _is_number(value):
            return value

        if isinstance(value, Mapping):
            fields: Dict[str, Any] = {}
            for field_name, field_value in value.items():
                if field_value is None:
                    continue
                if not isinstance(field_name, str) or not _is_number(field_value):
                    raise SerializationError(
                        f"Metric '{name}' field {field_name!r} has "
                        f"non-numeric value {field_value!r}",
                        metric_name=name,
                    )
                fields[field_name] = field_value
            return fields

        raise SerializationError(
            f"Metric '{name}' has unsupported value {value!r}",
            metric_name=name,
        )
