"""
Domain Layer - Core Reporter Types.

This package contains the core domain model of the metrics reporter.
Everything here is pure Python with no infrastructure dependencies
(except Pydantic for validation).

Entities:
    - ReporterState: Lifecycle state of a reporter
    - WriteRecord: One fully-qualified metric and its value
    - Batch: Materialized write records plus their target
    - ReporterStats: Counters describing reporter activity

Value Objects:
    - TimeUnit: Unit used for flush and retry intervals

Errors:
    - ReporterError and its subclasses (see errors.py)
"""

from metrics_reporter.domain.entities import (
    Batch,
    ReporterState,
    ReporterStats,
    WriteRecord,
)
from metrics_reporter.domain.errors import (
    DuplicateCollectionError,
    InvalidStateError,
    ProbeError,
    ReporterError,
    SerializationError,
    WriteError,
)
from metrics_reporter.domain.value_objects import TimeUnit, to_seconds

__all__ = [
    "Batch",
    "ReporterState",
    "ReporterStats",
    "WriteRecord",
    "DuplicateCollectionError",
    "InvalidStateError",
    "ProbeError",
    "ReporterError",
    "SerializationError",
    "WriteError",
    "TimeUnit",
    "to_seconds",
]
