"""
Metrics Reporter - Main Orchestrator.

The MetricsReporter ships registered metric collections to a storage
backend. It first probes the backend, retrying every few seconds until
the probe succeeds, then flushes all collections immediately and at a
fixed interval until stopped.

Lifecycle:
    idle --start()--> probing --probe ok--> running
    any  --stop()---> stopped (terminal)

Events (subscribe with on()):
    start   probe succeeded, emitted before the first write
    update  a write completed successfully
    error   a probe, serialization or write failed (payload: the error)
    stop    stop() was called (emitted once)

Runtime failures never raise to the caller; they are delivered as
"error" events, or logged when nobody listens for "error".
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Type, Union

from metrics_reporter.config.models import ReporterConfig
from metrics_reporter.domain.entities import Batch, ReporterState, ReporterStats
from metrics_reporter.domain.errors import (
    InvalidStateError,
    ProbeError,
    ReporterError,
    SerializationError,
    WriteError,
)
from metrics_reporter.domain.value_objects import TimeUnit, to_seconds
from metrics_reporter.interfaces.clock import Clock
from metrics_reporter.interfaces.storage_client import StorageClient
from metrics_reporter.registry.collection_registry import CollectionRegistry
from metrics_reporter.reporter.events import EventEmitter, Handler
from metrics_reporter.scheduling.clock import WallClock
from metrics_reporter.scheduling.scheduler import DoneCallback, Scheduler
from metrics_reporter.serialization.snapshot_serializer import SnapshotSerializer

logger = logging.getLogger(__name__)

REPORTER_EVENTS = ("start", "update", "stop", "error")


def _once(callback: Callable[[Any], None]) -> Callable[..., None]:
    """Wrap a completion callback so only its first call counts."""
    called = False
    lock = threading.Lock()

    def wrapper(err: Any = None) -> None:
        nonlocal called
        with lock:
            if called:
                logger.warning("Completion callback invoked more than once, ignoring")
                return
            called = True
        callback(err)

    return wrapper


class MetricsReporter:
    """
    Probes a storage backend, then periodically writes collection snapshots.

    All collaborators are injectable; defaults use the wall clock.
    """

    def __init__(
        self,
        client: StorageClient,
        config: Optional[ReporterConfig] = None,
        clock: Optional[Clock] = None,
        registry: Optional[CollectionRegistry] = None,
        serializer: Optional[SnapshotSerializer] = None,
        scheduler: Optional[Scheduler] = None,
        observability: Optional[Any] = None,
    ) -> None:
        """
        Initialize reporter.

        Args:
            client: Storage backend (probe/write with completion callbacks)
            config: Reporter configuration
            clock: Time source shared by scheduler and serializer
            registry: Collection registry
            serializer: Snapshot serializer
            scheduler: Scheduler for probe retries and flushes
            observability: ObservabilityManager for structured events (optional)
        """
        self.config = config or ReporterConfig()
        self._client = client
        self._clock = clock or WallClock()
        self._registry = registry or CollectionRegistry()
        self._serializer = serializer or SnapshotSerializer(
            clock=self._clock,
            index_prefix=self.config.index_prefix,
            date_format=self.config.index_date_format,
        )
        self._scheduler = scheduler or Scheduler(self._clock)
        self.observability = observability

        self._events = EventEmitter(REPORTER_EVENTS)
        self._lock = threading.RLock()
        self._state = ReporterState.IDLE
        self._interval_seconds: Optional[float] = None
        self._flush_in_flight = False

        self._probes = 0
        self._probe_failures = 0
        self._flushes = 0
        self._flush_failures = 0
        self._records_written = 0
        self._last_flush_at: Optional[datetime] = None

    # =========================================================================
    # Public API
    # =========================================================================

    def start(
        self,
        interval: Optional[int] = None,
        unit: Optional[Union[TimeUnit, str]] = None,
    ) -> None:
        """
        Start probing the backend; flushing begins once a probe succeeds.

        Args:
            interval: Flush interval (default from config, 60)
            unit: Unit of interval (default seconds). Only valid together
                with interval; start() alone uses the configured unit

        Raises:
            InvalidStateError: If the reporter is not idle
            ValueError: If the interval is not positive, or a unit is
                given without an interval
        """
        if interval is None:
            if unit is not None:
                raise ValueError("A flush unit was given without an interval")
            interval = self.config.flush_interval
            unit = self.config.flush_unit
        seconds = to_seconds(interval, unit or TimeUnit.SECONDS)

        with self._lock:
            if self._state is not ReporterState.IDLE:
                raise InvalidStateError(
                    f"Cannot start reporter in state '{self._state.value}'"
                )
            self._state = ReporterState.PROBING
            self._interval_seconds = seconds

        logger.info(f"Starting reporter, flush interval {seconds}s")
        self._log_event("reporter_starting", {"flush_interval_seconds": seconds})
        self._scheduler.schedule_retrying(self._probe, self.config.probe_retry_seconds)

    def stop(self) -> None:
        """
        Stop all scheduling, end every collection and emit "stop".

        Calling stop() again has no effect.
        """
        with self._lock:
            if self._state is ReporterState.STOPPED:
                return
            previous = self._state
            self._state = ReporterState.STOPPED

        self._scheduler.cancel_all()
        failures = self._registry.finalize_all()
        if failures:
            logger.warning(f"{len(failures)} collection(s) failed to end cleanly")

        logger.info(f"Reporter stopped (was {previous.value})")
        self._log_event("reporter_stopped", {"previous_state": previous.value})
        self._events.emit("stop")

    def flush(self) -> bool:
        """
        Run one flush cycle now, outside the regular schedule.

        Returns:
            False if the reporter is not running or a flush is in flight
        """
        with self._lock:
            if self._state is not ReporterState.RUNNING or self._flush_in_flight:
                return False
        self._flush_cycle(lambda success: None)
        return True

    def add_collection(self, collection: Any, prefix: Optional[str] = None) -> None:
        """
        Register a collection for future flush cycles.

        A collection added after stop() is ended right away, since no
        flush will read it and stop() will not run again.
        """
        self._registry.add(collection, prefix)
        # stop() sets the state before finalizing, so one of the two ends it
        if self.state is ReporterState.STOPPED:
            failures = self._registry.finalize_all()
            if failures:
                logger.warning("Collection added after stop failed to end cleanly")

    def remove_collection(self, collection: Any) -> bool:
        """Unregister a collection from future flush cycles."""
        return self._registry.remove(collection)

    def on(self, event: str, handler: Handler) -> None:
        """Subscribe to "start", "update", "stop" or "error"."""
        self._events.on(event, handler)

    def off(self, event: str, handler: Handler) -> bool:
        """Unsubscribe a handler."""
        return self._events.off(event, handler)

    @property
    def state(self) -> ReporterState:
        with self._lock:
            return self._state

    @property
    def is_running(self) -> bool:
        return self.state is ReporterState.RUNNING

    @property
    def registry(self) -> CollectionRegistry:
        return self._registry

    @property
    def interval_seconds(self) -> Optional[float]:
        """Flush interval in seconds, once started."""
        with self._lock:
            return self._interval_seconds

    @property
    def stats(self) -> ReporterStats:
        """Activity counters."""
        with self._lock:
            return ReporterStats(
                probes=self._probes,
                probe_failures=self._probe_failures,
                flushes=self._flushes,
                flush_failures=self._flush_failures,
                records_written=self._records_written,
                last_flush_at=self._last_flush_at,
            )

    # =========================================================================
    # Probe
    # =========================================================================

    def _probe(self, done: DoneCallback) -> None:
        with self._lock:
            self._probes += 1

        callback = _once(lambda err: self._on_probe_result(err, done))
        try:
            self._client.probe(callback)
        except Exception as e:
            callback(e)

    def _on_probe_result(self, err: Any, done: DoneCallback) -> None:
        with self._lock:
            if self._state is not ReporterState.PROBING:
                logger.debug(f"Discarding probe result in state '{self._state.value}'")
                return
            if err is not None:
                self._probe_failures += 1
            else:
                self._state = ReporterState.RUNNING
            interval = self._interval_seconds

        if err is not None:
            error = self._as_error(err, ProbeError, "Storage probe failed")
            logger.warning(
                f"Storage probe failed, retrying in {self.config.probe_retry_seconds}s: {error}"
            )
            self._log_event("probe_failed", {"error": str(error)}, level="warning")
            self._record_count("probe_failures_total")
            self._emit_error(error)
            done(False)
            return

        done(True)
        self._scheduler.cancel_retrying()
        logger.info("Storage probe succeeded, reporter running")
        self._log_event("reporter_started", {"flush_interval_seconds": interval})
        self._events.emit("start")

        if self.state is not ReporterState.RUNNING:
            return
        self._scheduler.schedule_recurring(self._flush_cycle, interval)
        # stop() may have cancelled the scheduler before the recurring
        # schedule was armed
        if self.state is ReporterState.STOPPED:
            self._scheduler.cancel_all()

    # =========================================================================
    # Flush cycle
    # =========================================================================

    def _flush_cycle(self, done: DoneCallback) -> None:
        with self._lock:
            if self._state is not ReporterState.RUNNING or self._flush_in_flight:
                done(True)
                return
            self._flush_in_flight = True

        cycle_id = self.observability.begin_cycle() if self.observability else None
        started = time.perf_counter()
        try:
            try:
                batch = self._serializer.snapshot(self._registry.snapshot_entries())
            except SerializationError as e:
                self._on_flush_failed(e, cycle_id, done)
                return
            except Exception as e:
                logger.exception("Unexpected error while building flush batch")
                error = SerializationError(f"Snapshot failed: {e}")
                error.__cause__ = e
                self._on_flush_failed(error, cycle_id, done)
                return

            callback = _once(
                lambda err: self._on_write_result(batch, err, started, cycle_id, done)
            )
            try:
                self._client.write(batch.target, batch.records, callback)
            except Exception as e:
                callback(e)
        finally:
            if self.observability:
                self.observability.end_cycle()

    def _on_write_result(
        self,
        batch: Batch,
        err: Any,
        started: float,
        cycle_id: Optional[str],
        done: DoneCallback,
    ) -> None:
        if err is not None:
            error = self._as_error(
                err, WriteError, f"Write to '{batch.target}' failed", target=batch.target
            )
            self._on_flush_failed(error, cycle_id, done)
            return

        duration = time.perf_counter() - started
        with self._lock:
            self._flush_in_flight = False
            if self._state is ReporterState.STOPPED:
                logger.debug("Discarding write result, reporter stopped")
                done(True)
                return
            self._flushes += 1
            self._records_written += batch.size
            self._last_flush_at = datetime.fromtimestamp(self._clock.now(), tz=timezone.utc)

        logger.debug(f"Wrote {batch.size} record(s) to {batch.target} in {duration:.3f}s")
        self._log_event(
            "flush_completed",
            {
                "cycle_id": cycle_id,
                "target": batch.target,
                "records": batch.size,
                "duration_seconds": duration,
            },
        )
        if self.observability:
            self.observability.record_timing("flush_duration_seconds", duration)
            self.observability.record_metric("batch_records", float(batch.size))
        self._events.emit("update")
        done(True)

    def _on_flush_failed(
        self, error: BaseException, cycle_id: Optional[str], done: DoneCallback
    ) -> None:
        with self._lock:
            self._flush_in_flight = False
            if self._state is ReporterState.STOPPED:
                logger.debug(f"Discarding flush failure, reporter stopped: {error}")
                done(False)
                return
            self._flushes += 1
            self._flush_failures += 1

        logger.error(f"Flush failed: {error}")
        self._log_event(
            "flush_failed",
            {"cycle_id": cycle_id, "error": str(error)},
            level="error",
        )
        self._emit_error(error)
        done(False)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _emit_error(self, error: BaseException) -> None:
        if self._events.emit("error", error) == 0:
            logger.warning(f"Unhandled reporter error: {error!r}")

    def _as_error(
        self,
        err: Any,
        error_class: Type[ReporterError],
        message: str,
        **kwargs: Any,
    ) -> BaseException:
        """Pass exceptions through; wrap other failure values."""
        if isinstance(err, BaseException):
            return err
        return error_class(f"{message}: {err!r}", detail=err, **kwargs)

    def _log_event(
        self,
        event_type: str,
        data: Optional[dict] = None,
        level: str = "info",
    ) -> None:
        if self.observability:
            self.observability.log_event(event_type, data, level=level)

    def _record_count(self, name: str) -> None:
        if self.observability:
            self.observability.record_count(name)
