#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

from typing import Dict, List, Optional

from leaklab.common.definitions.config import LeakLabConfig
from leaklab.common.definitions.events import EventKind, LifecycleEvent
from leaklab.common.definitions.instances import ComponentInstance, InstanceState, Variant, ViewMode
from leaklab.common.definitions.results import Result
from leaklab.common.definitions.stats import MemoryStats, VariantBreakdown
from leaklab.common.lifecycle.registry import InstanceRegistry
from leaklab.common.logging.logger import setup_logger, set_logging_level
from leaklab.common.memory.allocation_simulator import AllocationSimulator
from leaklab.common.memory.leak_detector import LeakDetector
from leaklab.common.metrics.performance import track_lifecycle
from leaklab.common.metrics.stats_aggregator import StatsAggregator
from leaklab.common.scheduling.monitor import MemoryMonitor, SampleCallback
from leaklab.common.scheduling.subscription import StatsSubscription


class LeakLab:
    """Tracking and accounting core of the leaky/proper component demo.

    This is the single surface a UI talks to. It holds the only copy of the
    memory accounting: the UI issues commands (create, destroy, clear leaked,
    switch mode) and renders the ``MemoryStats`` it gets back, either on demand
    through ``sample`` or pushed through ``subscribe``.

    The host framework's teardown hook maps to an explicit ``destroy`` call.
    Whether teardown actually releases memory is decided by the ``Variant``
    the instance was created with, which is how the "forgot to clean up" bug
    is reproduced on purpose.
    """

    def __init__(self, config: Optional[LeakLabConfig] = None, mode: ViewMode = ViewMode.LEAKY):
        """Build the core.

        Args:
            config (Optional[LeakLabConfig]): Static configuration, defaults apply when omitted.
            mode (ViewMode): Initial view mode, used by ``create`` when no variant is given.
        """
        self.config = config if config is not None else LeakLabConfig()
        # the level is process wide, so only touch it when asked to
        if self.config.log_level is not None:
            set_logging_level(self.config.log_level)
        self.logger = setup_logger(__file__)

        self.simulator = AllocationSimulator()
        self.detector = LeakDetector(self.simulator)
        self.registry = InstanceRegistry(self.config, self.simulator, self.detector)
        self.aggregator = StatsAggregator(self.registry)
        self.monitor = MemoryMonitor(self.aggregator, self.config.sample_interval)

        self._mode = mode
        self._shut_down = False

    def _ensure_open(self):
        if self._shut_down:
            raise RuntimeError("LeakLab has been shut down")

    @property
    def mode(self) -> ViewMode:
        return self._mode

    def switch_mode(self, mode: ViewMode) -> None:
        """Change the view mode. Existing instances are left untouched."""
        self._ensure_open()
        if not isinstance(mode, ViewMode):
            raise ValueError(f"Unknown view mode: {mode!r}")
        if mode == self._mode:
            return
        self.registry.record_event(EventKind.MODE_SWITCHED, f"{self._mode.value} -> {mode.value}")
        self.logger.info(f"View mode switched to {mode.value}")
        self._mode = mode

    @track_lifecycle("create")
    def create(self, variant: Optional[Variant] = None, block_size: Optional[int] = None) -> Result[str]:
        """Create one instance.

        Args:
            variant (Optional[Variant]): Defaults to the variant of the current view mode.
                Required in COMPARISON mode, which has no single variant.
            block_size (Optional[int]): Defaults to ``config.default_block_size``.

        Returns:
            Result[str]: The new id, or ``CapacityExceeded``.
        """
        self._ensure_open()
        if variant is None:
            variants = self._mode.variants()
            if len(variants) != 1:
                raise ValueError("A variant is required in comparison mode, use create_for_mode()")
            variant = variants[0]
        return self.registry.create(variant, block_size)

    def create_for_mode(self, block_size: Optional[int] = None) -> List[Result[str]]:
        """Create what the current view shows: one instance, or a leaky/proper pair in COMPARISON."""
        return [self.create(variant, block_size) for variant in self._mode.variants()]

    @track_lifecycle("destroy")
    def destroy(self, instance_id: str) -> Result[None]:
        self._ensure_open()
        return self.registry.destroy(instance_id)

    def destroy_all(self, variant: Optional[Variant] = None) -> int:
        """Destroy every ACTIVE instance, optionally of one variant only.

        Returns:
            int: Number of instances destroyed.
        """
        self._ensure_open()
        with self.registry.lock:
            targets = self.registry.list(variant=variant, state=InstanceState.ACTIVE)
            return sum(1 for instance in targets if self.destroy(instance.id))

    def clear_leaked(self) -> int:
        """Manual GC: release every leaked block and return how many were cleared."""
        self._ensure_open()
        return self.registry.clear_leaked()

    def sample(self) -> MemoryStats:
        return self.aggregator.sample()

    def breakdown(self) -> Dict[Variant, VariantBreakdown]:
        return self.aggregator.breakdown()

    def is_leak_warning(self) -> bool:
        return self.detector.is_over_threshold(self.config.leak_warning_threshold)

    def instances(
            self,
            variant: Optional[Variant] = None,
            state: Optional[InstanceState] = None,
    ) -> List[ComponentInstance]:
        return self.registry.list(variant=variant, state=state)

    def events(self, limit: Optional[int] = None) -> List[LifecycleEvent]:
        return self.registry.events(limit)

    def subscribe(self, interval: Optional[float] = None, max_buffer: int = 16) -> StatsSubscription:
        """Push ``MemoryStats`` every ``interval`` seconds until the subscription is cancelled.

        Must be called from a running event loop.
        """
        self._ensure_open()
        return self.monitor.subscribe(interval, max_buffer)

    async def start_monitor(self, interval: Optional[float] = None, on_sample: Optional[SampleCallback] = None):
        self._ensure_open()
        await self.monitor.start(interval, on_sample)

    async def stop_monitor(self):
        await self.monitor.stop_watcher()

    async def shutdown(self):
        """Cancel every sampling timer. The core refuses mutations afterwards."""
        if self._shut_down:
            return
        self._shut_down = True
        await self.monitor.stop()
        stats = self.sample()
        self.logger.info(f"LeakLab shut down | {stats.describe()}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()
