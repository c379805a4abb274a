#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

import asyncio
from collections import deque
from typing import Callable, Deque, Optional

from leaklab.common.definitions.stats import MemoryStats
from leaklab.common.logging.logger import setup_logger

logger = setup_logger(__name__)


class StatsSubscription:
    """
    A cancellable stream of ``MemoryStats`` pushed on a fixed interval.

    The subscription owns a single timer task that samples immediately and
    then once per ``interval``. Consumers read it with ``async for``. When the
    consumer is slower than the timer, the oldest buffered snapshots are
    dropped so the stream always ends at the freshest state.

    Example:
        async with lab.subscribe(0.5) as stream:
            async for stats in stream:
                render(stats)
    """

    def __init__(
            self,
            sampler: Callable[[], MemoryStats],
            interval: float,
            max_buffer: int = 16,
            on_close: Optional[Callable[['StatsSubscription'], None]] = None,
    ):
        if interval <= 0:
            raise ValueError("Sampling interval must be positive")
        if max_buffer <= 0:
            raise ValueError("max_buffer must be positive")

        self.interval = interval
        self._sampler = sampler
        self._buffer: Deque[MemoryStats] = deque(maxlen=max_buffer)
        self._ready = asyncio.Event()
        self._on_close = on_close
        self._task: Optional[asyncio.Task] = None
        self._closed = False
        self.dropped = 0

    def start(self) -> 'StatsSubscription':
        if self._closed:
            raise RuntimeError("Subscription is closed")
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self

    async def _run(self):
        try:
            while True:
                self._push(self._sampler())
                await asyncio.sleep(self.interval)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Stats sampling failed, closing subscription: {e}")
            self._close()

    def _push(self, stats: MemoryStats) -> None:
        if len(self._buffer) == self._buffer.maxlen:
            self.dropped += 1
        self._buffer.append(stats)
        self._ready.set()

    def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._ready.set()
        if self._on_close is not None:
            self._on_close(self)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def cancel(self) -> None:
        """Stop the timer and end the stream. Safe to call more than once."""
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        self._close()

    def __aiter__(self):
        return self

    async def __anext__(self) -> MemoryStats:
        while True:
            if self._buffer:
                return self._buffer.popleft()
            if self._closed:
                raise StopAsyncIteration
            self._ready.clear()
            await self._ready.wait()

    async def __aenter__(self):
        return self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cancel()
