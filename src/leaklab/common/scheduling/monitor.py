#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

import asyncio
import inspect
from typing import Awaitable, Callable, Optional, Set, Union

from leaklab.common.definitions.stats import MemoryStats, format_bytes
from leaklab.common.logging.logger import setup_logger
from leaklab.common.metrics.stats_aggregator import StatsAggregator
from leaklab.common.scheduling.subscription import StatsSubscription

logger = setup_logger(__name__)

SampleCallback = Callable[[MemoryStats], Union[None, Awaitable[None]]]


class MemoryMonitor:
    """
    Owns every periodic sampling timer of the core.

    Subscriptions handed out by ``subscribe`` are tracked until they close,
    and ``stop`` cancels all of them together with the background watcher,
    so no sampling task outlives the monitor.
    """

    def __init__(self, aggregator: StatsAggregator, interval: float = 1.0):
        if interval <= 0:
            raise ValueError("Monitor interval must be positive")
        self.aggregator = aggregator
        self.interval = interval
        self.last_stats: Optional[MemoryStats] = None

        self._subscriptions: Set[StatsSubscription] = set()
        self._watcher: Optional[asyncio.Task] = None
        self._watch_subscription: Optional[StatsSubscription] = None
        self._warning_active = False

    def subscribe(self, interval: Optional[float] = None, max_buffer: int = 16) -> StatsSubscription:
        """Start a new stats stream. Must be called from a running event loop."""
        subscription = StatsSubscription(
            self.aggregator.sample,
            self.interval if interval is None else interval,
            max_buffer=max_buffer,
            on_close=self._subscriptions.discard,
        )
        # only track timers that actually started
        subscription.start()
        self._subscriptions.add(subscription)
        return subscription

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    @property
    def is_running(self) -> bool:
        return self._watcher is not None and not self._watcher.done()

    async def start(self, interval: Optional[float] = None, on_sample: Optional[SampleCallback] = None):
        """Start the background watcher that logs stats and raises leak warnings."""
        if self.is_running:
            return
        self._watch_subscription = self.subscribe(interval)
        self._watcher = asyncio.create_task(self._watch(self._watch_subscription, on_sample))
        logger.info(f"Memory monitor started, sampling every {self._watch_subscription.interval}s")

    async def _watch(self, subscription: StatsSubscription, on_sample: Optional[SampleCallback]):
        async for stats in subscription:
            self.last_stats = stats
            self._check_threshold(stats)
            logger.debug(stats.describe())
            if on_sample is None:
                continue
            try:
                result = on_sample(stats)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Stats callback failed: {e}")

    def _check_threshold(self, stats: MemoryStats) -> None:
        # warn once per crossing, not on every sample
        if stats.leak_warning and not self._warning_active:
            self._warning_active = True
            logger.warning(
                f"Leaked memory {format_bytes(stats.leaked_memory)} is over the "
                f"{format_bytes(self.aggregator.leak_warning_threshold)} threshold"
            )
        elif not stats.leak_warning and self._warning_active:
            self._warning_active = False
            logger.info("Leaked memory back under the warning threshold")

    async def stop_watcher(self) -> None:
        """Stop the background watcher, leaving other subscriptions running."""
        watcher, self._watcher = self._watcher, None
        subscription, self._watch_subscription = self._watch_subscription, None
        if subscription is not None:
            await subscription.cancel()
        if watcher is not None:
            watcher.cancel()
            await asyncio.gather(watcher, return_exceptions=True)
            logger.info("Memory monitor stopped")

    async def stop(self) -> None:
        """Stop the watcher and cancel every outstanding subscription."""
        await self.stop_watcher()
        subscriptions = list(self._subscriptions)
        await asyncio.gather(*(s.cancel() for s in subscriptions), return_exceptions=True)
