"""
Pytest Configuration and Shared Fixtures.

This module contains fixtures available to all tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional
from unittest.mock import Mock

import pytest

from metrics_reporter.adapters.memory_client import InMemoryStorageClient
from metrics_reporter.adapters.metric_collection import InMemoryMetricCollection
from metrics_reporter.config.models import ReporterConfig
from metrics_reporter.reporter.metrics_reporter import MetricsReporter
from metrics_reporter.scheduling.clock import ManualClock

# 2024-12-15T00:00:00Z
REFERENCE_TIME = 1734220800.0


class StubClient:
    """
    Storage client whose probe/write are Mocks that call back inline.

    Set probe_error / write_error to make the next calls fail. Every call
    is appended to journal, so tests can check ordering against events.
    """

    def __init__(self, journal: Optional[List[str]] = None) -> None:
        self.probe_error: Optional[Any] = None
        self.write_error: Optional[Any] = None
        self.journal = journal if journal is not None else []
        self.probe = Mock(side_effect=self._probe)
        self.write = Mock(side_effect=self._write)

    def _probe(self, callback: Any) -> None:
        self.journal.append("probe")
        callback(self.probe_error)

    def _write(self, target: str, records: Any, callback: Any) -> None:
        self.journal.append("write")
        callback(self.write_error)


@pytest.fixture
def sample_config_path() -> Path:
    """Path to sample configuration file."""
    return Path(__file__).parent / "fixtures" / "sample_config.yaml"


@pytest.fixture
def journal() -> List[str]:
    """Shared call/event log for ordering assertions."""
    return []


@pytest.fixture
def clock() -> ManualClock:
    """Virtual clock starting at the reference time."""
    return ManualClock(start=REFERENCE_TIME)


@pytest.fixture
def client(journal: List[str]) -> StubClient:
    """Reachable stub storage client."""
    return StubClient(journal)


@pytest.fixture
def memory_client() -> InMemoryStorageClient:
    """In-memory storage client."""
    return InMemoryStorageClient()


@pytest.fixture
def default_config() -> ReporterConfig:
    """Default reporter configuration."""
    return ReporterConfig()


@pytest.fixture
def reporter(client: StubClient, clock: ManualClock) -> MetricsReporter:
    """Idle reporter on the stub client and virtual clock."""
    return MetricsReporter(client, clock=clock)


@pytest.fixture
def collection() -> InMemoryMetricCollection:
    """Unnamed collection with one incremented counter."""
    metrics = InMemoryMetricCollection()
    metrics.counter("mycount").inc()
    return metrics
