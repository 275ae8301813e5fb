from __future__ import annotations

import asyncio

import pytest

from app.api.apostas import bet_event_stream, format_sse
from app.core.events import BetEvent, BetEventBus


class FakeRequest:
    def __init__(self) -> None:
        self.disconnected = False

    async def is_disconnected(self) -> bool:
        return self.disconnected


def test_stream_subscribes_on_first_iteration_only() -> None:
    async def scenario() -> None:
        bus = BetEventBus()
        stream = bet_event_stream(FakeRequest(), "u1", bus, heartbeat=30)
        assert bus.listener_count() == 0

        assert await stream.__anext__() == ": connected\n\n"
        assert bus.listener_count() == 1

        await stream.aclose()
        assert bus.listener_count() == 0

    asyncio.run(scenario())


def test_stream_forwards_only_own_events() -> None:
    async def scenario() -> None:
        bus = BetEventBus()
        stream = bet_event_stream(FakeRequest(), "u1", bus, heartbeat=30)
        await stream.__anext__()

        bus.publish(BetEvent(user_id="u2", type="created", payload={"betId": "x"}))
        mine = BetEvent(user_id="u1", type="updated", payload={"betId": "b1"})
        bus.publish(mine)

        assert await stream.__anext__() == format_sse(mine)
        await stream.aclose()

    asyncio.run(scenario())


def test_stream_sends_keep_alive() -> None:
    async def scenario() -> None:
        stream = bet_event_stream(FakeRequest(), "u1", BetEventBus(), heartbeat=0.01)
        await stream.__anext__()
        assert await stream.__anext__() == ": keep-alive\n\n"
        await stream.aclose()

    asyncio.run(scenario())


def test_bus_close_ends_waiting_stream() -> None:
    async def scenario() -> None:
        bus = BetEventBus()
        stream = bet_event_stream(FakeRequest(), "u1", bus, heartbeat=30)
        await stream.__anext__()

        async def _next() -> str:
            return await stream.__anext__()

        pending = asyncio.create_task(_next())
        await asyncio.sleep(0)
        bus.close()

        with pytest.raises(StopAsyncIteration):
            await asyncio.wait_for(pending, timeout=1)
        assert bus.listener_count() == 0

    asyncio.run(scenario())


def test_stream_on_closed_bus_ends_after_handshake() -> None:
    async def scenario() -> None:
        bus = BetEventBus()
        bus.close()
        stream = bet_event_stream(FakeRequest(), "u1", bus, heartbeat=30)

        assert await stream.__anext__() == ": connected\n\n"
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    asyncio.run(scenario())


def test_client_disconnect_unsubscribes() -> None:
    async def scenario() -> None:
        bus = BetEventBus()
        request = FakeRequest()
        stream = bet_event_stream(request, "u1", bus, heartbeat=30)
        await stream.__anext__()

        request.disconnected = True
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()
        assert bus.listener_count() == 0

    asyncio.run(scenario())
