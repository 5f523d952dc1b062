"""
Interfaces Layer - Abstract Protocols for Collaborators.

This package defines the abstract interfaces (using typing.Protocol) for
everything the reporter talks to but does not own.

Protocols:
    - MetricCollection: Named grouping of metrics with a snapshot
    - StorageClient: Remote backend with probe and batched write
    - Clock / TimerHandle: Injectable time source for scheduling

Design Principles:
    - Use typing.Protocol (not ABC) for Pythonic interfaces
    - Small, focused interfaces
    - All methods have clear contracts in docstrings
"""

from metrics_reporter.interfaces.clock import Clock, TimerHandle
from metrics_reporter.interfaces.metric_collection import MetricCollection
from metrics_reporter.interfaces.storage_client import (
    CompletionCallback,
    StorageClient,
)

__all__ = [
    "Clock",
    "TimerHandle",
    "MetricCollection",
    "CompletionCallback",
    "StorageClient",
]
