from __future__ import annotations

import asyncio

import pytest

from linkedlookup_connectors.singleflight import SingleFlight


def test_concurrent_callers_share_one_fetch() -> None:
    calls: list[str] = []

    async def fetch() -> dict:
        calls.append("x")
        await asyncio.sleep(0)
        return {"id": "x"}

    async def scenario():
        flight: SingleFlight[dict] = SingleFlight()
        first = flight.get_or_fetch("x", fetch)
        second = flight.get_or_fetch("x", fetch)
        assert first is second
        return await asyncio.gather(first, second), flight

    (a, b), flight = asyncio.run(scenario())
    assert calls == ["x"]
    assert a is b
    assert "x" in flight
    assert len(flight) == 1


def test_later_callers_get_the_settled_value() -> None:
    calls: list[str] = []

    async def fetch() -> str:
        calls.append("k")
        return "value"

    async def scenario():
        flight: SingleFlight[str] = SingleFlight()
        first = await flight.get_or_fetch("k", fetch)
        second = await flight.get_or_fetch("k", fetch)
        return first, second

    assert asyncio.run(scenario()) == ("value", "value")
    assert calls == ["k"]


def test_distinct_keys_fetch_independently() -> None:
    async def scenario():
        flight: SingleFlight[str] = SingleFlight()

        async def make(key: str) -> str:
            return key.upper()

        values = await asyncio.gather(
            flight.get_or_fetch("a", lambda: make("a")),
            flight.get_or_fetch("b", lambda: make("b")),
        )
        return values, len(flight)

    assert asyncio.run(scenario()) == (["A", "B"], 2)


def test_failed_fetch_is_shared_too() -> None:
    calls: list[int] = []

    async def fetch() -> str:
        calls.append(1)
        raise RuntimeError("boom")

    async def scenario():
        flight: SingleFlight[str] = SingleFlight()
        for _ in range(2):
            with pytest.raises(RuntimeError):
                await flight.get_or_fetch("k", fetch)

    asyncio.run(scenario())
    assert calls == [1]
