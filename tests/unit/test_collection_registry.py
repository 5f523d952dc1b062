"""
Unit Tests for CollectionRegistry.

Tests:
    - Add/remove and prefix resolution
    - Duplicate registration policy
    - Copy-on-read snapshots
    - Finalization of current and removed collections
    - Thread-safety
"""

from __future__ import annotations

import threading
from unittest.mock import Mock

import pytest

from metrics_reporter.adapters.metric_collection import InMemoryMetricCollection
from metrics_reporter.domain.errors import DuplicateCollectionError
from metrics_reporter.registry.collection_registry import (
    CollectionEntry,
    CollectionRegistry,
)


class TestCollectionRegistryMembership:
    """Tests for add/remove."""

    def test_add_uses_collection_name_as_prefix(self) -> None:
        """Collection name becomes the prefix when none is given."""
        registry = CollectionRegistry()
        metrics = InMemoryMetricCollection("http")

        registry.add(metrics)

        assert registry.snapshot_entries() == [CollectionEntry(metrics, "http")]
        assert metrics in registry

    def test_add_with_explicit_prefix(self) -> None:
        """Explicit prefix wins over the collection name."""
        registry = CollectionRegistry()
        metrics = InMemoryMetricCollection("http")

        registry.add(metrics, prefix="api")

        assert registry.snapshot_entries()[0].prefix == "api"

    def test_add_unnamed_collection(self) -> None:
        """Collections without a name attribute get no prefix."""
        registry = CollectionRegistry()
        plain = Mock(spec=["to_dict", "end"])

        registry.add(plain)

        assert registry.snapshot_entries()[0].prefix is None

    def test_add_duplicate_raises(self) -> None:
        """Adding the same collection twice raises."""
        registry = CollectionRegistry()
        metrics = InMemoryMetricCollection("http")
        registry.add(metrics)

        with pytest.raises(DuplicateCollectionError, match="already registered"):
            registry.add(metrics, prefix="other")

        assert len(registry) == 1

    def test_equal_names_are_distinct_collections(self) -> None:
        """Membership is by identity, not by name."""
        registry = CollectionRegistry()

        registry.add(InMemoryMetricCollection("http"))
        registry.add(InMemoryMetricCollection("http"))

        assert registry.registered_count == 2

    def test_remove_existing(self) -> None:
        """Removing a registered collection returns True."""
        registry = CollectionRegistry()
        metrics = InMemoryMetricCollection()
        registry.add(metrics)

        assert registry.remove(metrics) is True
        assert len(registry) == 0
        assert metrics not in registry

    def test_remove_missing_returns_false(self) -> None:
        """Removing an unknown collection is not an error."""
        registry = CollectionRegistry()

        assert registry.remove(InMemoryMetricCollection()) is False

    def test_remove_does_not_end(self) -> None:
        """remove() never finalizes."""
        registry = CollectionRegistry()
        metrics = InMemoryMetricCollection()
        registry.add(metrics)

        registry.remove(metrics)

        assert not metrics.ended

    def test_re_add_after_remove(self) -> None:
        """A removed collection may be added again."""
        registry = CollectionRegistry()
        metrics = InMemoryMetricCollection()
        registry.add(metrics)
        registry.remove(metrics)

        registry.add(metrics)

        assert len(registry) == 1
        assert registry.ever_registered_count == 1


class TestCollectionRegistrySnapshots:
    """Tests for snapshot_entries()."""

    def test_preserves_registration_order(self) -> None:
        """Entries come back in registration order."""
        registry = CollectionRegistry()
        collections = [InMemoryMetricCollection(f"c{i}") for i in range(5)]
        for c in collections:
            registry.add(c)

        prefixes = [e.prefix for e in registry.snapshot_entries()]

        assert prefixes == ["c0", "c1", "c2", "c3", "c4"]

    def test_snapshot_is_a_copy(self) -> None:
        """Later mutation does not change an earlier snapshot."""
        registry = CollectionRegistry()
        first = InMemoryMetricCollection("first")
        registry.add(first)

        snapshot = registry.snapshot_entries()
        registry.remove(first)
        registry.add(InMemoryMetricCollection("second"))

        assert [e.prefix for e in snapshot] == ["first"]

    def test_entry_qualifies_names(self) -> None:
        """Prefix and metric name are joined with a dot."""
        assert CollectionEntry(Mock(), "foo").qualify("bar") == "foo.bar"
        assert CollectionEntry(Mock(), None).qualify("bar") == "bar"
        assert CollectionEntry(Mock(), "").qualify("bar") == "bar"


class TestCollectionRegistryFinalization:
    """Tests for finalize_all()."""

    def test_ends_current_and_removed(self) -> None:
        """Every collection ever registered is ended."""
        registry = CollectionRegistry()
        kept = InMemoryMetricCollection("kept")
        removed = InMemoryMetricCollection("removed")
        registry.add(kept)
        registry.add(removed)
        registry.remove(removed)

        failures = registry.finalize_all()

        assert failures == []
        assert kept.ended
        assert removed.ended

    def test_ends_each_collection_once(self) -> None:
        """Repeated finalize_all() and re-adding do not end twice."""
        registry = CollectionRegistry()
        metrics = Mock(spec=["to_dict", "end"])
        registry.add(metrics)
        registry.remove(metrics)
        registry.add(metrics)

        registry.finalize_all()
        registry.finalize_all()

        metrics.end.assert_called_once_with()

    def test_failing_end_does_not_stop_others(self) -> None:
        """A raising end() is reported, the rest are still ended."""
        registry = CollectionRegistry()
        broken = Mock(spec=["to_dict", "end"])
        broken.end.side_effect = RuntimeError("timer already gone")
        healthy = InMemoryMetricCollection()
        registry.add(broken)
        registry.add(healthy)

        failures = registry.finalize_all()

        assert len(failures) == 1
        assert failures[0][0] is broken
        assert healthy.ended


class TestCollectionRegistryThreadSafety:
    """Tests for concurrent access."""

    def test_concurrent_add_and_snapshot(self) -> None:
        """Concurrent adds and snapshots neither fail nor lose entries."""
        registry = CollectionRegistry()
        errors = []

        def add_many() -> None:
            try:
                for _ in range(200):
                    registry.add(InMemoryMetricCollection())
            except Exception as e:
                errors.append(e)

        def snapshot_many() -> None:
            try:
                for _ in range(200):
                    for entry in registry.snapshot_entries():
                        entry.collection.to_dict()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=add_many) for _ in range(4)]
        threads += [threading.Thread(target=snapshot_many) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert registry.registered_count == 800
