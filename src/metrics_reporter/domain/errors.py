"""
Reporter Error Taxonomy.

Runtime failures (probe, write, serialization) never propagate to the
caller; the reporter delivers them as payloads of the "error" event.
Caller misuse (InvalidStateError, DuplicateCollectionError) is raised
synchronously.
"""

from __future__ import annotations

from typing import Optional


class ReporterError(Exception):
    """Base class for all reporter errors."""
    pass


class ProbeError(ReporterError):
    """Connectivity check against the storage backend failed."""

    def __init__(self, message: str, detail: Optional[object] = None) -> None:
        super().__init__(message)
        self.detail = detail


class WriteError(ReporterError):
    """Batch delivery to the storage backend failed."""

    def __init__(
        self,
        message: str,
        target: Optional[str] = None,
        detail: Optional[object] = None,
    ) -> None:
        super().__init__(message)
        self.target = target
        self.detail = detail


class SerializationError(ReporterError):
    """A metric value could not be turned into a write record."""

    def __init__(self, message: str, metric_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.metric_name = metric_name


class InvalidStateError(ReporterError):
    """Operation not allowed in the reporter's current state."""
    pass


class DuplicateCollectionError(ReporterError):
    """The same collection was registered twice."""
    pass
