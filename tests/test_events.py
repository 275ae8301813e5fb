import pytest

from app.core.events import BetEvent, BetEventBus, emit_bet_event


def test_publish_without_listeners_is_noop() -> None:
    BetEventBus().publish(BetEvent(user_id="u1", type="created"))


def test_listeners_receive_in_registration_order() -> None:
    bus = BetEventBus()
    seen = []
    bus.subscribe(lambda e: seen.append(("a", e.type)))
    bus.subscribe(lambda e: seen.append(("b", e.type)))

    emit_bet_event(bus, "u1", "updated", {"betId": "b1"})

    assert seen == [("a", "updated"), ("b", "updated")]


def test_event_carries_payload() -> None:
    bus = BetEventBus()
    received = []
    bus.subscribe(received.append)

    event = emit_bet_event(bus, "u1", "deleted", {"scope": "all"})

    assert received == [event]
    assert received[0].payload == {"scope": "all"}
    assert received[0].user_id == "u1"


def test_unsubscribe_stops_delivery() -> None:
    bus = BetEventBus()
    received = []
    unsubscribe = bus.subscribe(received.append)
    unsubscribe()

    emit_bet_event(bus, "u1", "created")

    assert received == []
    assert bus.listener_count() == 0


def test_listener_added_during_publish_misses_current_event() -> None:
    bus = BetEventBus()
    late = []

    def first(_event: BetEvent) -> None:
        bus.subscribe(late.append)

    bus.subscribe(first)
    emit_bet_event(bus, "u1", "created")

    assert late == []
    assert bus.listener_count() == 2


def test_listener_exception_reaches_publisher() -> None:
    bus = BetEventBus()

    def broken(_event: BetEvent) -> None:
        raise RuntimeError("listener failed")

    bus.subscribe(broken)
    with pytest.raises(RuntimeError, match="listener failed"):
        emit_bet_event(bus, "u1", "created")


def test_close_drops_listeners() -> None:
    bus = BetEventBus()
    received = []
    bus.subscribe(received.append)

    bus.close()
    bus.subscribe(received.append)
    emit_bet_event(bus, "u1", "created")

    assert bus.closed
    assert bus.listener_count() == 0
    assert received == []


def test_close_runs_close_callbacks_once() -> None:
    bus = BetEventBus()
    calls = []
    bus.on_close(lambda: calls.append("a"))
    remove = bus.on_close(lambda: calls.append("b"))
    remove()

    bus.close()
    bus.close()

    assert calls == ["a"]


def test_on_close_after_close_is_not_registered() -> None:
    bus = BetEventBus()
    bus.close()
    calls = []

    remove = bus.on_close(lambda: calls.append("late"))
    remove()
    bus.close()

    assert calls == []


def test_buses_are_independent() -> None:
    first, second = BetEventBus(), BetEventBus()
    received = []
    first.subscribe(received.append)

    emit_bet_event(second, "u1", "created")

    assert received == []
