"""
Reporter Package - Lifecycle State Machine and Events.

Components:
    - MetricsReporter: Probes the backend, then flushes collections on a timer
    - EventEmitter: Ordered, exception-isolated event delivery
"""

from metrics_reporter.reporter.events import EventEmitter
from metrics_reporter.reporter.metrics_reporter import REPORTER_EVENTS, MetricsReporter

__all__ = ["EventEmitter", "MetricsReporter", "REPORTER_EVENTS"]
