"""
Integration Tests for the Reporter Lifecycle.

Test Aspects Covered:
    ✅ Integration: Reporter, registry, serializer, scheduler and client together
    ✅ Error Handling: Unreachable backend, rejected writes, recovery
    ✅ Configuration: Reporter built from YAML config
    ✅ Time Logic: Virtual and wall clock scheduling
"""

from __future__ import annotations

import threading
import time
from pathlib import Path

import metrics_reporter
from metrics_reporter.adapters.memory_client import InMemoryStorageClient
from metrics_reporter.adapters.metric_collection import InMemoryMetricCollection
from metrics_reporter.domain.entities import ReporterState
from metrics_reporter.domain.errors import ProbeError, WriteError
from metrics_reporter.scheduling.clock import ManualClock

# 2024-12-15T00:00:00Z
REFERENCE_TIME = 1734220800.0


class TestEndToEnd:
    """Full lifecycle on the in-memory backend."""

    def test_probe_flush_and_stop(self) -> None:
        """
        SCENARIO: Two collections, 10s interval, 30s pass, then stop
        EXPECTED: Four batches with prefixed names, collections ended
        """
        # Arrange
        clock = ManualClock(start=REFERENCE_TIME)
        client = InMemoryStorageClient()
        reporter = metrics_reporter.for_client(client, clock=clock)
        http = InMemoryMetricCollection("http")
        db = InMemoryMetricCollection("db")
        http.counter("requests").inc(3)
        db.gauge("pool_size", lambda: 8)
        reporter.add_collection(http)
        reporter.add_collection(db)
        updates = []
        reporter.on("update", lambda: updates.append(clock.now()))

        # Act
        reporter.start(10)
        clock.advance(30)
        reporter.stop()

        # Assert
        assert len(client.writes) == 4
        target, records = client.writes[0]
        assert target == "metrics-2024.12.15"
        assert [r.name for r in records] == ["http.requests", "db.pool_size"]
        assert [r.metric_type for r in records] == ["counter", "gauge"]
        assert updates == [REFERENCE_TIME + s for s in (0, 10, 20, 30)]
        assert http.ended and db.ended
        assert reporter.state is ReporterState.STOPPED

    def test_bulk_body_of_written_batch(self) -> None:
        """
        SCENARIO: One counter written
        EXPECTED: Records render as action/document pairs
        """
        clock = ManualClock(start=REFERENCE_TIME)
        client = InMemoryStorageClient()
        reporter = metrics_reporter.for_client(client, clock=clock)
        metrics = InMemoryMetricCollection("app")
        metrics.counter("hits").inc()
        reporter.add_collection(metrics)

        reporter.start(60)
        reporter.stop()

        _, records = client.writes[0]
        assert records[0].to_document() == {
            "@timestamp": "2024-12-15T00:00:00+00:00",
            "name": "app.hits",
            "value": 1,
        }

    def test_recovers_from_unreachable_backend(self) -> None:
        """
        SCENARIO: First three probes fail
        EXPECTED: Three probe errors, then start and writes every interval
        """
        clock = ManualClock(start=REFERENCE_TIME)
        client = InMemoryStorageClient()
        client.fail_next_probes(3)
        reporter = metrics_reporter.for_client(client, clock=clock)
        errors = []
        started = []
        reporter.on("error", errors.append)
        reporter.on("start", lambda: started.append(clock.now()))

        reporter.start(60)
        clock.advance(15)
        assert reporter.state is ReporterState.RUNNING
        clock.advance(60)
        reporter.stop()

        assert len(errors) == 3
        assert all(isinstance(e, ProbeError) for e in errors)
        assert started == [REFERENCE_TIME + 15]
        assert client.probe_calls == 4
        assert len(client.writes) == 2

    def test_keeps_flushing_through_rejected_writes(self) -> None:
        """
        SCENARIO: Writes rejected for two intervals, then backend recovers
        EXPECTED: Two write errors, schedule continues, later writes land
        """
        clock = ManualClock(start=REFERENCE_TIME)
        client = InMemoryStorageClient()
        reporter = metrics_reporter.for_client(client, clock=clock)
        reporter.add_collection(InMemoryMetricCollection("app"))
        errors = []
        reporter.on("error", errors.append)

        reporter.start(10)
        client.fail_writes()
        clock.advance(20)
        client.recover()
        clock.advance(10)
        reporter.stop()

        assert len(errors) == 2
        assert all(isinstance(e, WriteError) for e in errors)
        assert len(client.writes) == 2
        assert reporter.stats.flush_failures == 2

    def test_collections_added_while_running(self) -> None:
        """
        SCENARIO: Collection added between flushes, another removed
        EXPECTED: Next batch reflects current membership
        """
        clock = ManualClock(start=REFERENCE_TIME)
        client = InMemoryStorageClient()
        reporter = metrics_reporter.for_client(client, clock=clock)
        old = InMemoryMetricCollection("old")
        old.counter("c")
        reporter.add_collection(old)

        reporter.start(10)
        new = InMemoryMetricCollection("new")
        new.counter("c")
        reporter.add_collection(new)
        reporter.remove_collection(old)
        clock.advance(10)
        reporter.stop()

        assert [r.name for r in client.writes[0][1]] == ["old.c"]
        assert [r.name for r in client.writes[1][1]] == ["new.c"]
        assert old.ended and new.ended


class TestFromConfig:
    """Reporter built from a YAML config file."""

    def test_uses_configured_interval_and_prefix(self, sample_config_path: Path) -> None:
        """
        SCENARIO: Config with 10s interval and custom index prefix
        EXPECTED: start() without arguments uses both; events recorded
        """
        clock = ManualClock(start=REFERENCE_TIME)
        client = InMemoryStorageClient()
        reporter = metrics_reporter.from_config(client, sample_config_path, clock=clock)
        reporter.add_collection(InMemoryMetricCollection("checkout"))

        reporter.start()
        clock.advance(10)
        reporter.stop()

        assert reporter.interval_seconds == 10
        assert [t for t, _ in client.writes] == ["checkout-metrics-2024.12.15"] * 2
        events = reporter.observability.get_events()
        assert events[0]["service"] == "checkout-service"
        assert [e["event_type"] for e in events] == [
            "reporter_starting",
            "reporter_started",
            "flush_completed",
            "flush_completed",
            "reporter_stopped",
        ]


class TestWallClock:
    """Reporter on real time."""

    def test_flushes_on_real_timers(self) -> None:
        """
        SCENARIO: 20 ms interval on the wall clock
        EXPECTED: At least three writes within a second, none after stop
        """
        client = InMemoryStorageClient()
        reporter = metrics_reporter.for_client(client)
        reporter.add_collection(InMemoryMetricCollection("app"))
        enough = threading.Event()

        def on_update() -> None:
            if len(client.writes) >= 3:
                enough.set()

        reporter.on("update", on_update)

        reporter.start(20, "milliseconds")
        try:
            assert enough.wait(timeout=1.0)
        finally:
            reporter.stop()

        written = len(client.writes)
        time.sleep(0.1)
        assert len(client.writes) <= written + 1
