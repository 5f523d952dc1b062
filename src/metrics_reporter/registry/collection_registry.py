"""
Collection Registry - Dynamic Collection Management.

This module provides a thread-safe registry of metric collections.
Collections can be added and removed at any time, including while a
flush is in flight; flushes work on a copy taken when they begin.

Usage:
    registry = CollectionRegistry()
    registry.add(http_metrics)            # prefix taken from http_metrics.name
    registry.add(db_metrics, prefix="db")

    entries = registry.snapshot_entries()  # point-in-time copy

    registry.finalize_all()                # end() on every collection ever added

Finalization policy:
    finalize_all() ends every collection that was ever registered,
    including ones removed earlier. remove() never ends a collection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import RLock
from typing import Any, Dict, List, Optional, Protocol, Tuple

from metrics_reporter.domain.errors import DuplicateCollectionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionEntry:
    """A registered collection and the prefix of its metric names."""

    collection: Any
    prefix: Optional[str] = None

    def qualify(self, metric_name: str) -> str:
        """Fully-qualified name of a metric in this collection."""
        if self.prefix:
            return f"{self.prefix}.{metric_name}"
        return metric_name

    @property
    def label(self) -> str:
        return self.prefix or "<unnamed>"


class CollectionRegistryProtocol(Protocol):
    """Protocol for collection registry implementations."""

    def add(self, collection: Any, prefix: Optional[str] = None) -> None:
        """Register a collection."""
        ...

    def remove(self, collection: Any) -> bool:
        """Unregister a collection."""
        ...

    def snapshot_entries(self) -> List[CollectionEntry]:
        """Point-in-time copy of registered entries."""
        ...

    def finalize_all(self) -> List[Tuple[Any, Exception]]:
        """End every collection ever registered."""
        ...


class CollectionRegistry:
    """
    Thread-safe registry of metric collections.

    Supports:
        - Add/remove at any time, keyed by collection identity
        - Insertion-ordered, copy-on-read snapshots
        - Exactly-once finalization of every collection ever registered
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._entries: Dict[int, CollectionEntry] = {}
        self._ever_registered: Dict[int, Any] = {}
        self._finalized: Dict[int, Any] = {}
        self._lock = RLock()
        logger.debug("CollectionRegistry initialized")

    def add(self, collection: Any, prefix: Optional[str] = None) -> None:
        """
        Register a collection.

        Args:
            collection: Metric collection (to_dict/end, optional name)
            prefix: Name prefix; defaults to the collection's name

        Raises:
            DuplicateCollectionError: If the collection is already registered
        """
        if prefix is None:
            prefix = getattr(collection, "name", None)

        key = id(collection)
        with self._lock:
            if key in self._entries:
                raise DuplicateCollectionError(
                    f"Collection '{self._entries[key].label}' is already registered. "
                    f"Use remove() first."
                )

            entry = CollectionEntry(collection=collection, prefix=prefix)
            self._entries[key] = entry
            self._ever_registered[key] = collection
            logger.info(f"Registered collection: {entry.label}")

    def remove(self, collection: Any) -> bool:
        """
        Unregister a collection. The collection is not ended.

        Args:
            collection: Previously added collection

        Returns:
            True if removed, False if it was not registered
        """
        with self._lock:
            entry = self._entries.pop(id(collection), None)
            if entry is None:
                logger.debug("Cannot remove: collection not registered")
                return False

            logger.info(f"Removed collection: {entry.label}")
            return True

    def snapshot_entries(self) -> List[CollectionEntry]:
        """
        Get registered entries in registration order.

        Returns:
            A copy; later add/remove calls do not affect it
        """
        with self._lock:
            return list(self._entries.values())

    def finalize_all(self) -> List[Tuple[Any, Exception]]:
        """
        Call end() once on every collection ever registered.

        Collections already finalized by an earlier call are skipped.
        A failing end() is logged and does not stop the others.

        Returns:
            (collection, exception) pairs for every end() that raised
        """
        with self._lock:
            pending = [
                (key, collection)
                for key, collection in self._ever_registered.items()
                if key not in self._finalized
            ]
            for key, collection in pending:
                self._finalized[key] = collection

        failures: List[Tuple[Any, Exception]] = []
        for _, collection in pending:
            try:
                collection.end()
            except Exception as e:
                logger.error(f"Failed to end collection {collection!r}: {e}")
                failures.append((collection, e))

        if pending:
            logger.info(f"Finalized {len(pending)} collection(s)")
        return failures

    def __contains__(self, collection: Any) -> bool:
        with self._lock:
            return id(collection) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def registered_count(self) -> int:
        """Number of currently registered collections."""
        return len(self)

    @property
    def ever_registered_count(self) -> int:
        """Number of distinct collections ever registered."""
        with self._lock:
            return len(self._ever_registered)

    def clear(self) -> None:
        """Unregister all collections without ending them."""
        with self._lock:
            self._entries.clear()
            logger.info("Cleared all collections from registry")
