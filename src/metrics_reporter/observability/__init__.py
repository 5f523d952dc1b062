"""
Observability Package - Structured Logging and Internal Metrics.

This package provides observability for the reporter itself:
    - ObservabilityManager: structlog event log, flush cycle ids,
      internal metrics (flush durations, batch sizes, probe failures)

Design Principles:
    - Optional for the reporter (plain module logging always happens)
    - Structured JSON logging via structlog
    - Cycle ID propagation through contextvars
"""

from metrics_reporter.observability.observability_manager import (
    ObservabilityManager,
    get_cycle_id,
    set_cycle_id,
)

__all__ = ["ObservabilityManager", "get_cycle_id", "set_cycle_id"]
