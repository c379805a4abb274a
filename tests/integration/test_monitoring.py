import asyncio

import pytest

from leaklab import LeakLab, Variant


@pytest.mark.asyncio
async def test_subscribe_streams_current_state(lab):
    async with lab.subscribe(0.01) as stream:
        first = await stream.__anext__()
        lab.create(Variant.LEAKY)
        async for stats in stream:
            if stats.component_count == 1:
                break
    assert first.component_count == 0
    assert lab.monitor.subscription_count == 0


@pytest.mark.asyncio
async def test_monitor_callback_and_warning(lab):
    samples = []

    async def on_sample(stats):
        samples.append(stats)

    await lab.start_monitor(0.01, on_sample)
    assert lab.monitor.is_running
    ids = [lab.create(Variant.LEAKY).value for _ in range(4)]
    for instance_id in ids:
        lab.destroy(instance_id)
    await asyncio.sleep(0.05)

    assert samples
    assert samples[-1].leak_warning
    assert lab.monitor.last_stats.leaked_memory == 4 * 1024 * 1024

    await lab.stop_monitor()
    assert not lab.monitor.is_running
    assert lab.monitor.subscription_count == 0
    count = len(samples)
    await asyncio.sleep(0.05)
    assert len(samples) == count


@pytest.mark.asyncio
async def test_failing_callback_keeps_monitor_alive(lab):
    calls = []

    def on_sample(stats):
        calls.append(stats)
        raise RuntimeError("render failed")

    await lab.start_monitor(0.01, on_sample)
    await asyncio.sleep(0.05)
    assert len(calls) > 1
    assert lab.monitor.is_running
    await lab.stop_monitor()


@pytest.mark.asyncio
async def test_shutdown_cancels_every_timer(config):
    lab = LeakLab(config)
    streams = [lab.subscribe(0.01) for _ in range(3)]
    await lab.start_monitor(0.01)

    await lab.shutdown()

    assert all(s.closed and not s.running for s in streams)
    assert not lab.monitor.is_running
    assert lab.monitor.subscription_count == 0
    with pytest.raises(RuntimeError):
        lab.create(Variant.LEAKY)
    # snapshots stay readable after shutdown
    assert lab.sample().component_count == 0


@pytest.mark.asyncio
async def test_context_manager_shuts_down(config):
    async with LeakLab(config) as lab:
        stream = lab.subscribe()
    assert stream.closed


def test_subscribe_without_loop_leaves_nothing_tracked(lab):
    with pytest.raises(RuntimeError):
        lab.subscribe(0.01)
    assert lab.monitor.subscription_count == 0


@pytest.mark.parametrize("interval", [0, -1.0])
def test_subscribe_rejects_non_positive_interval(lab, interval):
    with pytest.raises(ValueError):
        lab.subscribe(interval)
    assert lab.monitor.subscription_count == 0
