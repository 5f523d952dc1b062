"""
Unit Tests for EventEmitter.

Test Aspects Covered:
    ✅ Business Logic: Ordered delivery, payloads
    ✅ Error Handling: Raising handlers, unknown events
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from metrics_reporter.reporter.events import EventEmitter


@pytest.fixture
def emitter() -> EventEmitter:
    return EventEmitter(["start", "error"])


def test_handlers_called_in_subscription_order(emitter: EventEmitter) -> None:
    """Handlers run in the order they subscribed."""
    calls = []
    emitter.on("start", lambda: calls.append(1))
    emitter.on("start", lambda: calls.append(2))
    emitter.on("start", lambda: calls.append(3))

    count = emitter.emit("start")

    assert calls == [1, 2, 3]
    assert count == 3


def test_payload_passed_to_handlers(emitter: EventEmitter) -> None:
    """Arguments of emit() reach every handler."""
    handler = Mock()
    err = Exception("boom")
    emitter.on("error", handler)

    emitter.emit("error", err)

    handler.assert_called_once_with(err)


def test_raising_handler_isolated(emitter: EventEmitter) -> None:
    """A raising handler does not stop later handlers."""
    later = Mock()
    emitter.on("start", Mock(side_effect=RuntimeError("bug")))
    emitter.on("start", later)

    emitter.emit("start")

    later.assert_called_once_with()


def test_emit_without_handlers(emitter: EventEmitter) -> None:
    """Emitting with no handlers reports zero deliveries."""
    assert emitter.emit("error", Exception()) == 0


def test_off_removes_handler(emitter: EventEmitter) -> None:
    """Unsubscribed handlers are not called."""
    handler = Mock()
    emitter.on("start", handler)

    assert emitter.off("start", handler) is True
    assert emitter.off("start", handler) is False
    emitter.emit("start")

    handler.assert_not_called()
    assert emitter.listener_count("start") == 0


def test_unknown_event(emitter: EventEmitter) -> None:
    """Unknown event names are rejected everywhere."""
    with pytest.raises(ValueError):
        emitter.on("finish", Mock())
    with pytest.raises(ValueError):
        emitter.emit("finish")


def test_handler_subscribing_during_emit_runs_next_time(emitter: EventEmitter) -> None:
    """Handlers added during delivery are called from the next emit on."""
    late = Mock()
    emitter.on("start", lambda: emitter.on("start", late))

    emitter.emit("start")
    late.assert_not_called()

    emitter.emit("start")
    late.assert_called_once_with()
