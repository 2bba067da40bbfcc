from __future__ import annotations

import pytest

from prefloc.relay import Bus, Relay


def test_message_is_not_delivered_to_sender() -> None:
    bus = Bus()
    a, b = Relay(bus, "a"), Relay(bus, "b")
    got_a, got_b = [], []
    a.listen("t", got_a.append)
    b.listen("t", got_b.append)

    a.broadcast("t", 1)

    assert got_a == []
    assert [(m.payload, m.sender) for m in got_b] == [(1, "a")]


def test_target_limits_delivery() -> None:
    bus = Bus()
    a, b, c = Relay(bus, "a"), Relay(bus, "b"), Relay(bus, "c")
    got_b, got_c = [], []
    b.listen("t", got_b.append)
    c.listen("t", got_c.append)

    a.broadcast("t", "hi", target="c")

    assert got_b == []
    assert len(got_c) == 1


def test_topics_are_independent() -> None:
    bus = Bus()
    a, b = Relay(bus, "a"), Relay(bus, "b")
    got = []
    b.listen("x", got.append)

    a.broadcast("y", 1)

    assert got == []


def test_nested_publish_is_deferred_until_current_delivery_finishes() -> None:
    bus = Bus()
    a, b, c = Relay(bus, "a"), Relay(bus, "b"), Relay(bus, "c")
    order = []

    def b_handler(msg):
        order.append(("b", msg.topic))
        if msg.topic == "first":
            b.broadcast("second", None)

    b.listen("first", b_handler)
    c.listen("first", lambda msg: order.append(("c", msg.topic)))
    c.listen("second", lambda msg: order.append(("c", msg.topic)))

    a.broadcast("first", None)

    assert order == [("b", "first"), ("c", "first"), ("c", "second")]


def test_close_unsubscribes() -> None:
    bus = Bus()
    a, b = Relay(bus, "a"), Relay(bus, "b")
    got = []
    b.listen("t", got.append)
    b.close()

    a.broadcast("t", 1)

    assert got == []


def test_failed_delivery_drops_messages_queued_by_the_failing_handler() -> None:
    bus = Bus()
    a, b, c = Relay(bus, "a"), Relay(bus, "b"), Relay(bus, "c")
    got_c = []

    def b_handler(msg):
        b.broadcast("late", "stale")
        raise RuntimeError("handler failed")

    b.listen("first", b_handler)
    c.listen("late", got_c.append)
    c.listen("other", got_c.append)

    with pytest.raises(RuntimeError):
        a.broadcast("first", None)
    a.broadcast("other", None)

    assert [m.topic for m in got_c] == ["other"]
