"""
Registry Module - Dynamic Collection Membership.

This module tracks the metric collections attached to a reporter,
each tagged with an optional name prefix.

Components:
    - CollectionRegistry: Thread-safe registry with copy-on-read snapshots
    - CollectionEntry: A registered collection and its prefix
"""

from metrics_reporter.registry.collection_registry import (
    CollectionEntry,
    CollectionRegistry,
    CollectionRegistryProtocol,
)

__all__ = [
    "CollectionEntry",
    "CollectionRegistry",
    "CollectionRegistryProtocol",
]
