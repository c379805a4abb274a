import asyncio

import pytest

from leaklab import MemoryStats
from leaklab.common.scheduling.subscription import StatsSubscription


def _counter_sampler():
    calls = {"n": 0}

    def sample():
        calls["n"] += 1
        return MemoryStats(component_count=calls["n"])

    return sample, calls


class TestStatsSubscription:

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            StatsSubscription(MemoryStats, interval=0)
        with pytest.raises(ValueError):
            StatsSubscription(MemoryStats, interval=1, max_buffer=0)

    def test_start_needs_running_loop(self):
        with pytest.raises(RuntimeError):
            StatsSubscription(MemoryStats, interval=1).start()

    @pytest.mark.asyncio
    async def test_pushes_samples_in_order(self):
        sampler, _ = _counter_sampler()
        received = []
        async with StatsSubscription(sampler, interval=0.01) as stream:
            async for stats in stream:
                received.append(stats.component_count)
                if len(received) == 3:
                    break
        assert received == [1, 2, 3]
        assert stream.closed
        assert not stream.running

    @pytest.mark.asyncio
    async def test_cancel_ends_iteration(self):
        sampler, calls = _counter_sampler()
        stream = StatsSubscription(sampler, interval=0.01).start()

        async def consume():
            return [s async for s in stream]

        consumer = asyncio.create_task(consume())
        await asyncio.sleep(0.05)
        await stream.cancel()
        received = await asyncio.wait_for(consumer, timeout=1)

        assert len(received) >= 1
        count = calls["n"]
        await asyncio.sleep(0.05)
        assert calls["n"] == count  # no orphaned timer

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self):
        closed = []
        stream = StatsSubscription(MemoryStats, interval=0.01, on_close=closed.append).start()
        await stream.cancel()
        await stream.cancel()
        assert closed == [stream]

    @pytest.mark.asyncio
    async def test_slow_consumer_drops_oldest(self):
        sampler, _ = _counter_sampler()
        stream = StatsSubscription(sampler, interval=0.005, max_buffer=2).start()
        await asyncio.sleep(0.1)
        await stream.cancel()

        remaining = [s.component_count async for s in stream]
        assert len(remaining) == 2
        assert remaining[0] < remaining[1]
        assert stream.dropped > 0

    @pytest.mark.asyncio
    async def test_sampler_failure_closes_stream(self):
        def broken():
            raise RuntimeError("boom")

        stream = StatsSubscription(broken, interval=0.01).start()
        received = await asyncio.wait_for(_drain(stream), timeout=1)
        assert received == []
        assert stream.closed


async def _drain(stream):
    return [s async for s in stream]
