"""Unit tests for EventBus."""

from pomobar.core.events import SESSION_COMPLETED, TIMER_UPDATED, EventBus


def test_emit_calls_listener_with_args():
    bus = EventBus()
    received = []
    bus.subscribe(SESSION_COMPLETED, lambda *args: received.append(args))
    bus.emit(SESSION_COMPLETED, "work")
    assert received == [("work",)]


def test_listeners_called_in_subscription_order():
    bus = EventBus()
    order = []
    bus.subscribe(TIMER_UPDATED, lambda: order.append("a"))
    bus.subscribe(TIMER_UPDATED, lambda: order.append("b"))
    bus.emit(TIMER_UPDATED)
    assert order == ["a", "b"]


def test_emit_without_listeners_is_noop():
    EventBus().emit(TIMER_UPDATED)


def test_other_events_not_delivered():
    bus = EventBus()
    received = []
    bus.subscribe(TIMER_UPDATED, lambda: received.append(1))
    bus.emit(SESSION_COMPLETED, "work")
    assert received == []


def test_unsubscribe():
    bus = EventBus()
    received = []

    def listener():
        received.append(1)

    bus.subscribe(TIMER_UPDATED, listener)
    bus.unsubscribe(TIMER_UPDATED, listener)
    bus.emit(TIMER_UPDATED)
    assert received == []


def test_unsubscribe_unknown_listener_is_noop():
    EventBus().unsubscribe(TIMER_UPDATED, lambda: None)


def test_failing_listener_is_logged_and_skipped(caplog):
    bus = EventBus()
    received = []

    def broken():
        raise RuntimeError("boom")

    bus.subscribe(TIMER_UPDATED, broken)
    bus.subscribe(TIMER_UPDATED, lambda: received.append(1))

    with caplog.at_level("ERROR", logger="pomobar.core.events"):
        bus.emit(TIMER_UPDATED)

    assert received == [1]
    assert "failed for event timer_updated" in caplog.text


def test_listener_may_unsubscribe_during_emit():
    bus = EventBus()
    received = []

    def once():
        received.append(1)
        bus.unsubscribe(TIMER_UPDATED, once)

    bus.subscribe(TIMER_UPDATED, once)
    bus.emit(TIMER_UPDATED)
    bus.emit(TIMER_UPDATED)
    assert received == [1]
