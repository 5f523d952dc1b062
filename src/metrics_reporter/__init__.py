"""
Metrics Reporter - Ships In-Process Metric Collections to Remote Storage.

A reporter periodically snapshots registered metric collections and
writes them, batched, to a storage backend, after first verifying
connectivity through a retried health probe.

Architecture:
    - Hexagonal Architecture (Ports & Adapters)
    - Dependency Injection for testability (clock, client, registry)
    - Configuration-driven behavior via YAML

Main Components:
    - domain: Core types (ReporterState, WriteRecord, Batch, errors)
    - interfaces: Protocols for collections, storage clients, clocks
    - registry: Dynamic collection membership
    - serialization: Snapshot to batch transform
    - scheduling: Retrying and recurring timers
    - reporter: Lifecycle state machine and events
    - adapters: In-memory collection and storage client
    - config: Configuration models and loaders

Example:
    >>> import metrics_reporter
    >>> reporter = metrics_reporter.for_client(client)
    >>> reporter.add_collection(collection)
    >>> reporter.on("error", lambda err: print(err))
    >>> reporter.start(10)
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

from metrics_reporter.adapters.elasticsearch_client import ElasticsearchStorageClient
from metrics_reporter.config.loader import load_config
from metrics_reporter.config.models import ReporterConfig
from metrics_reporter.domain.entities import Batch, ReporterState, WriteRecord
from metrics_reporter.domain.errors import (
    DuplicateCollectionError,
    InvalidStateError,
    ProbeError,
    ReporterError,
    SerializationError,
    WriteError,
)
from metrics_reporter.domain.value_objects import TimeUnit
from metrics_reporter.observability.observability_manager import ObservabilityManager
from metrics_reporter.reporter.metrics_reporter import MetricsReporter

__version__ = "0.3.0"


def configure_logging(
    level: int = logging.INFO,
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
) -> None:
    """
    Configure logging for the metrics reporter.

    Call this at application startup to see log messages.
    By default, only WARNING and above are visible.

    Args:
        level: Logging level (default: INFO)
        format: Log message format

    Example:
        >>> import metrics_reporter
        >>> metrics_reporter.configure_logging(logging.DEBUG)
    """
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("metrics_reporter").setLevel(level)


def _as_storage_client(client: Any) -> Any:
    """Use client as-is if it has probe/write; wrap ping/bulk clients."""
    if callable(getattr(client, "probe", None)) and callable(getattr(client, "write", None)):
        return client
    if callable(getattr(client, "ping", None)) and callable(getattr(client, "bulk", None)):
        return ElasticsearchStorageClient(client)
    raise TypeError(
        f"{type(client).__name__} is not a storage client: "
        f"expected probe()/write() or ping()/bulk()"
    )


def for_client(
    client: Any,
    config: Optional[ReporterConfig] = None,
    clock: Optional[Any] = None,
    observability: Optional[Any] = None,
) -> MetricsReporter:
    """
    Create a reporter writing to client.

    Args:
        client: Storage client with probe() and write(), or an
            Elasticsearch client with ping() and bulk()
        config: Reporter configuration (defaults apply if omitted)
        clock: Time source (wall clock if omitted)
        observability: ObservabilityManager (optional)

    Returns:
        An idle MetricsReporter

    Raises:
        TypeError: If client offers neither interface
    """
    return MetricsReporter(
        _as_storage_client(client),
        config=config,
        clock=clock,
        observability=observability,
    )


def from_config(
    client: Any,
    config_path: Union[str, Path],
    profile: Optional[str] = None,
    clock: Optional[Any] = None,
) -> MetricsReporter:
    """
    Create a reporter from a YAML configuration file.

    Structured logging is set up from the file's logging section.

    Args:
        client: Storage client with probe() and write(), or an
            Elasticsearch client with ping() and bulk()
        config_path: Path to YAML config file
        profile: Optional profile name to merge
        clock: Time source (wall clock if omitted)

    Returns:
        An idle MetricsReporter
    """
    config = load_config(config_path, profile)
    observability = ObservabilityManager.from_config(
        config.logging, service_name=config.service_name
    )
    return MetricsReporter(
        _as_storage_client(client),
        config=config,
        clock=clock,
        observability=observability,
    )


__all__ = [
    "Batch",
    "DuplicateCollectionError",
    "ElasticsearchStorageClient",
    "InvalidStateError",
    "MetricsReporter",
    "ProbeError",
    "ReporterConfig",
    "ReporterError",
    "ReporterState",
    "SerializationError",
    "TimeUnit",
    "WriteError",
    "WriteRecord",
    "configure_logging",
    "for_client",
    "from_config",
]
