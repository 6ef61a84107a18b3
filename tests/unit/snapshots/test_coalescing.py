"""Tests for the SingleFlight registry."""

import asyncio

import pytest

from timeboard.snapshots.coalescing import SingleFlight


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_followers_share_leader_result(self) -> None:
        flight = SingleFlight()
        release = asyncio.Event()
        calls = 0

        async def work() -> int:
            nonlocal calls
            calls += 1
            await release.wait()
            return 42

        tasks = [asyncio.create_task(flight.run("k", work)) for _ in range(3)]
        await asyncio.sleep(0)
        assert flight.in_flight("k")

        release.set()
        assert await asyncio.gather(*tasks) == [42, 42, 42]
        assert calls == 1

    @pytest.mark.asyncio
    async def test_key_released_after_completion(self) -> None:
        flight = SingleFlight()
        calls = 0

        async def work() -> int:
            nonlocal calls
            calls += 1
            return calls

        assert await flight.run("k", work) == 1
        assert not flight.in_flight("k")
        assert await flight.run("k", work) == 2

    @pytest.mark.asyncio
    async def test_different_keys_run_independently(self) -> None:
        flight = SingleFlight()
        release = asyncio.Event()

        async def work() -> str:
            await release.wait()
            return "done"

        a = asyncio.create_task(flight.run("a", work))
        b = asyncio.create_task(flight.run("b", work))
        await asyncio.sleep(0)
        assert flight.in_flight("a") and flight.in_flight("b")

        release.set()
        assert await asyncio.gather(a, b) == ["done", "done"]

    @pytest.mark.asyncio
    async def test_exception_reaches_every_caller(self) -> None:
        flight = SingleFlight()
        release = asyncio.Event()

        async def work() -> int:
            await release.wait()
            raise RuntimeError("upstream exploded")

        tasks = [asyncio.create_task(flight.run("k", work)) for _ in range(2)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert all(isinstance(r, RuntimeError) for r in results)
        assert not flight.in_flight("k")

    @pytest.mark.asyncio
    async def test_cancelled_leader_cancels_followers(self) -> None:
        flight = SingleFlight()

        async def work() -> int:
            await asyncio.sleep(10)
            return 1

        leader = asyncio.create_task(flight.run("k", work))
        await asyncio.sleep(0)
        follower = asyncio.create_task(flight.run("k", work))
        await asyncio.sleep(0)

        leader.cancel()
        with pytest.raises(asyncio.CancelledError):
            await leader
        with pytest.raises(asyncio.CancelledError):
            await follower
        assert not flight.in_flight("k")
