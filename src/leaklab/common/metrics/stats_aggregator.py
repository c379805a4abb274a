#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

from typing import Dict, Optional

from leaklab.common.definitions.instances import InstanceState, Variant
from leaklab.common.definitions.stats import MemoryStats, VariantBreakdown
from leaklab.common.lifecycle.registry import InstanceRegistry


class StatsAggregator:
    """
    Derives ``MemoryStats`` snapshots from the registry, simulator and detector.

    Every call recomputes from the current state under the registry lock.
    Nothing is cached between calls, so a snapshot can never lag behind a
    mutation that finished before it was taken.
    """

    def __init__(self, registry: InstanceRegistry, leak_warning_threshold: Optional[int] = None):
        self.registry = registry
        if leak_warning_threshold is None:
            leak_warning_threshold = registry.config.leak_warning_threshold
        self.leak_warning_threshold = leak_warning_threshold

    def sample(self) -> MemoryStats:
        registry = self.registry
        with registry.lock:
            return MemoryStats(
                total_allocated=registry.simulator.total_allocated(),
                current_usage=registry.simulator.current_usage(),
                leaked_memory=registry.detector.leaked_memory,
                component_count=registry.active_count,
                leak_warning=registry.detector.is_over_threshold(self.leak_warning_threshold),
            )

    def breakdown(self) -> Dict[Variant, VariantBreakdown]:
        """Counters per variant, for the side by side comparison view."""
        registry = self.registry
        with registry.lock:
            leaked = set(registry.detector.leaked_ids())
            result = {}
            for variant in Variant:
                instances = registry.list(variant=variant)
                leaked_sizes = [i.block_size for i in instances if i.id in leaked]
                result[variant] = VariantBreakdown(
                    active=sum(1 for i in instances if i.state == InstanceState.ACTIVE),
                    destroyed=sum(1 for i in instances if i.state == InstanceState.DESTROYED),
                    leaked_blocks=len(leaked_sizes),
                    leaked_memory=sum(leaked_sizes),
                )
            return result
