"""
Core Domain Entities.

This module defines the entities the reporter operates on: its lifecycle
state, the write records produced from collection snapshots, and the
batch that carries them to the storage backend.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


# Scalar metric value or structured value (e.g. meter rates)
MetricValue = Union[int, float, Dict[str, Union[int, float]]]


class ReporterState(str, Enum):
    """Lifecycle state of a reporter."""

    IDLE = "idle"
    PROBING = "probing"
    RUNNING = "running"
    STOPPED = "stopped"


class WriteRecord(BaseModel):
    """One fully-qualified metric and its value, as carried in a batch."""

    name: str = Field(..., description="Fully-qualified metric name")
    value: MetricValue = Field(..., description="Scalar or structured value")
    metric_type: str = Field(default="metric", description="Metric kind")
    timestamp: datetime = Field(..., description="Snapshot time (UTC)")

    model_config = {"frozen": True}

    def to_document(self) -> Dict[str, Any]:
        """Render the record as a storage document."""
        document: Dict[str, Any] = {
            "@timestamp": self.timestamp.isoformat(),
            "name": self.name,
        }
        if isinstance(self.value, dict):
            document.update(self.value)
        else:
            document["value"] = self.value
        return document


class Batch(BaseModel):
    """Write records of one flush cycle plus their destination."""

    target: str = Field(..., description="Destination name, e.g. an index")
    records: List[WriteRecord] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def size(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def to_bulk_body(self) -> List[Dict[str, Any]]:
        """
        Render the batch in Elasticsearch bulk layout.

        Every record becomes an action header followed by its document.

        Returns:
            Flat list alternating action headers and documents
        """
        body: List[Dict[str, Any]] = []
        for record in self.records:
            body.append({"index": {"_type": record.metric_type}})
            body.append(record.to_document())
        return body


class ReporterStats(BaseModel):
    """Snapshot of reporter activity counters."""

    probes: int = 0
    probe_failures: int = 0
    flushes: int = 0
    flush_failures: int = 0
    records_written: int = 0
    last_flush_at: Optional[datetime] = None

    model_config = {"frozen": True}
