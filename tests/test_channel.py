"""Tests for the event channel completion and cancellation contract."""

from __future__ import annotations

import asyncio

from agent_gateway.errors import OperationCancelled
from agent_gateway.streaming import CancellationToken, Event, EventChannel
from agent_gateway.streaming.events import response


def test_channel_delivers_exactly_one_end() -> None:
    async def _run() -> list[Event]:
        channel = EventChannel()

        async def producer() -> None:
            channel.emit(response("a"))
            channel.emit(Event(type="end"))
            channel.emit(response("late"))
            channel.close()

        channel.start(producer())
        events = await channel.collect()
        await channel.join()
        return events

    events = asyncio.run(_run())

    assert [e.type for e in events] == ["response", "end"]


def test_channel_closes_when_producer_returns_or_crashes() -> None:
    async def _run() -> tuple[list[Event], list[Event]]:
        done = EventChannel(name="done")
        done.start(asyncio.sleep(0))

        crashed = EventChannel(name="crashed")

        async def boom() -> None:
            crashed.emit(response("partial"))
            raise RuntimeError("boom")

        crashed.start(boom())
        return await done.collect(), await crashed.collect()

    done_events, crashed_events = asyncio.run(_run())

    assert [e.type for e in done_events] == ["end"]
    assert [e.type for e in crashed_events] == ["response", "end"]


def test_late_listeners_replay_history() -> None:
    async def _run() -> tuple[list[Event], list[Event]]:
        channel = EventChannel()

        async def producer() -> None:
            channel.emit(response("one"))
            await asyncio.sleep(0)
            channel.emit(response("two"))

        channel.start(producer())
        first = await channel.collect()
        second = await channel.collect()
        return first, second

    first, second = asyncio.run(_run())

    assert first == second
    assert [e.data for e in first] == ["one", "two", None]


def test_cancellation_ends_stream_without_waiting_for_producer() -> None:
    async def _run() -> tuple[list[Event], bool]:
        token = CancellationToken()
        channel = EventChannel(token=token)
        finished = asyncio.Event()

        async def producer() -> None:
            channel.emit(response("before"))
            await asyncio.sleep(0.2)
            # emissions after cancellation are dropped
            channel.emit(response("after"))
            finished.set()

        channel.start(producer())
        await asyncio.sleep(0.01)
        token.cancel()
        events = await channel.collect()
        producer_done_early = finished.is_set()
        await channel.join()
        return events, producer_done_early

    events, producer_done_early = asyncio.run(_run())

    assert [e.type for e in events] == ["response", "end"]
    assert events[0].data == "before"
    assert not producer_done_early


def test_emit_after_cancellation_is_rejected() -> None:
    async def _run() -> tuple[bool, list[Event]]:
        token = CancellationToken()
        channel = EventChannel(token=token)
        token.cancel()
        accepted = channel.emit(response("x"))
        channel.close()
        return accepted, channel.history

    accepted, history = asyncio.run(_run())

    assert accepted is False
    assert [e.type for e in history] == ["end"]


def test_operation_cancelled_in_producer_is_not_an_error() -> None:
    async def _run() -> list[Event]:
        token = CancellationToken()
        channel = EventChannel(token=token)

        async def producer() -> None:
            token.cancel()
            token.raise_if_cancelled()

        channel.start(producer())
        events = await channel.collect()
        await channel.join()
        return events

    events = asyncio.run(_run())

    assert [e.type for e in events] == ["end"]


def test_raise_if_cancelled_carries_reason() -> None:
    async def _run() -> str:
        token = CancellationToken()
        token.cancel("client disconnected")
        try:
            token.raise_if_cancelled()
        except OperationCancelled as exc:
            return str(exc)
        return ""

    assert asyncio.run(_run()) == "client disconnected"
