"""
Adapters Package - Infrastructure Implementations.

This package contains concrete implementations of the abstract
interfaces defined in the interfaces package.

Collections:
    - InMemoryMetricCollection: Counters and gauges kept in memory

Storage clients:
    - InMemoryStorageClient: Records batches in memory, scriptable failures
    - ElasticsearchStorageClient: Wraps an Elasticsearch client (ping/bulk)

Design Principles:
    - All adapters implement their respective protocols
    - Easily swappable via Dependency Injection
    - No reporter logic in adapters
"""

from metrics_reporter.adapters.elasticsearch_client import ElasticsearchStorageClient
from metrics_reporter.adapters.memory_client import InMemoryStorageClient
from metrics_reporter.adapters.metric_collection import (
    Counter,
    Gauge,
    InMemoryMetricCollection,
)

__all__ = [
    "Counter",
    "ElasticsearchStorageClient",
    "Gauge",
    "InMemoryMetricCollection",
    "InMemoryStorageClient",
]
