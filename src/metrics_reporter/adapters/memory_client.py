"""
In-Memory Storage Client.

Stores written batches in memory and calls completion callbacks inline.
Failures can be scripted to exercise probe retries and write errors.
"""

from __future__ import annotations

from threading import Lock
from typing import Any, Callable, List, Optional, Sequence, Tuple

from metrics_reporter.domain.entities import WriteRecord
from metrics_reporter.domain.errors import ProbeError, WriteError


class InMemoryStorageClient:
    """Storage client that keeps every batch in memory."""

    def __init__(self) -> None:
        """Initialize with a reachable backend."""
        self.probe_calls = 0
        self._writes: List[Tuple[str, List[WriteRecord]]] = []
        self._failing_probes = 0
        self._write_error: Optional[Any] = None
        self._lock = Lock()

    def fail_next_probes(self, count: int) -> None:
        """Make the next count probes fail with ProbeError."""
        with self._lock:
            self._failing_probes = count

    def fail_writes(self, error: Optional[Any] = None) -> None:
        """Make writes fail until recover() is called."""
        with self._lock:
            self._write_error = error or WriteError("Storage backend rejected the batch")

    def recover(self) -> None:
        """Make probes and writes succeed again."""
        with self._lock:
            self._failing_probes = 0
            self._write_error = None

    def probe(self, callback: Callable[[Optional[Any]], None]) -> None:
        with self._lock:
            self.probe_calls += 1
            failing = self._failing_probes > 0
            if failing:
                self._failing_probes -= 1
        callback(ProbeError("Storage backend unreachable") if failing else None)

    def write(
        self,
        target: str,
        records: Sequence[WriteRecord],
        callback: Callable[[Optional[Any]], None],
    ) -> None:
        with self._lock:
            error = self._write_error
            if error is None:
                self._writes.append((target, list(records)))
        callback(error)

    @property
    def writes(self) -> List[Tuple[str, List[WriteRecord]]]:
        """Successful writes as (target, records) pairs."""
        with self._lock:
            return list(self._writes)

    @property
    def records(self) -> List[WriteRecord]:
        """All successfully written records, in write order."""
        with self._lock:
            return [record for _, records in self._writes for record in records]
