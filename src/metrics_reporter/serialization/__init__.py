"""
Serialization Package - Registry State to Write Batches.

Components:
    - SnapshotSerializer: Turns registry entries into a Batch
"""

from metrics_reporter.serialization.snapshot_serializer import SnapshotSerializer

__all__ = ["SnapshotSerializer"]
