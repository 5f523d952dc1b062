"""
Storage Client Protocol.

Defines the asynchronous, callback-based contract of the remote storage
backend. Implementations may invoke the callback inline (synchronous
transports) or later from another thread.

The callback receives None on success and the failure otherwise.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, Sequence, runtime_checkable

from metrics_reporter.domain.entities import WriteRecord

CompletionCallback = Callable[[Optional[Any]], None]


@runtime_checkable
class StorageClient(Protocol):
    """Abstract interface for the storage backend."""

    def probe(self, callback: CompletionCallback) -> None:
        """
        Check connectivity.

        Args:
            callback: Called once with None or the failure
        """
        ...

    def write(
        self,
        target: str,
        records: Sequence[WriteRecord],
        callback: CompletionCallback,
    ) -> None:
        """
        Write one batch of records.

        Args:
            target: Destination name (e.g. a time-partitioned index)
            records: Ordered records; may be empty
            callback: Called once with None or the failure
        """
        ...
