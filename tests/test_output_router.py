"""Tests for routing queued source output to the presentation sink."""

from __future__ import annotations

import asyncio
import logging

import pytest

from perigee.adapters.events import (
    NETWORK_SOURCE,
    NetworkMessage,
    SessionOutput,
    make_event,
)
from perigee.adapters.output_router import OutputRouter
from perigee.engine.subscription import Subscription


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.01)
    await asyncio.wait_for(_poll(), timeout)


@pytest.mark.asyncio
async def test_lines_delivered_in_order():
    queue: asyncio.Queue[str] = asyncio.Queue(maxsize=100)
    received = []
    router = OutputRouter(received.append)
    router.add_source(Subscription("tidal", queue))
    router.arm("tidal")

    for line in ("a", "b", "c"):
        await queue.put(line)
    await _wait_for(lambda: len(received) == 3)

    assert [e.line for e in received] == ["a", "b", "c"]
    assert all(isinstance(e, SessionOutput) and e.source == "tidal" for e in received)
    assert router.delivered["tidal"] == 3
    await router.close()


@pytest.mark.asyncio
async def test_unarmed_source_is_not_drained():
    queue: asyncio.Queue[str] = asyncio.Queue(maxsize=100)
    received = []
    router = OutputRouter(received.append)
    router.add_source(Subscription("osc", queue), NETWORK_SOURCE)
    queue.put_nowait("/play ,s bd")
    await asyncio.sleep(0.05)

    assert received == []
    assert not router.is_armed("osc")

    assert router.arm("osc") is True
    assert router.arm("osc") is False
    await _wait_for(lambda: len(received) == 1)
    assert isinstance(received[0], NetworkMessage)
    await router.close()
    assert not router.is_armed("osc")


@pytest.mark.asyncio
async def test_arm_unknown_source_raises():
    router = OutputRouter(lambda event: None)
    with pytest.raises(KeyError):
        router.arm("nope")


@pytest.mark.asyncio
async def test_failing_sink_keeps_draining(caplog):
    queue: asyncio.Queue[str] = asyncio.Queue(maxsize=100)
    received = []

    def sink(event):
        if event.line == "boom":
            raise RuntimeError("render failed")
        received.append(event.line)

    router = OutputRouter(sink)
    router.add_source(Subscription("sclang", queue))
    router.arm_all()
    with caplog.at_level(logging.ERROR):
        for line in ("ok", "boom", "after"):
            await queue.put(line)
        await _wait_for(lambda: len(received) == 2)

    assert received == ["ok", "after"]
    assert any("Event sink failed" in r.getMessage() for r in caplog.records)
    await router.close()


@pytest.mark.asyncio
async def test_async_sink_is_awaited():
    queue: asyncio.Queue[str] = asyncio.Queue(maxsize=100)
    received = []

    async def sink(event):
        await asyncio.sleep(0)
        received.append(event.line)

    router = OutputRouter(sink)
    router.add_source(Subscription("tidal", queue))
    router.arm_all()
    await queue.put("x")
    await _wait_for(lambda: received == ["x"])
    await router.close()


def test_make_event_extracts_instrument():
    event = make_event(NETWORK_SOURCE, "osc", "/play ,ssf kalimba a 0.5")
    assert isinstance(event, NetworkMessage)
    assert event.instrument == "kalimba"

    with pytest.raises(ValueError):
        make_event("carrier-pigeon", "x", "y")


def test_subscription_poll_does_not_wait():
    queue: asyncio.Queue[str] = asyncio.Queue(maxsize=2)
    subscription = Subscription("tidal", queue)
    assert subscription.poll() is None
    queue.put_nowait("line")
    assert subscription.pending == 1
    assert subscription.poll() == "line"
