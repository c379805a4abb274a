#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

from typing import Iterable, List

from leaklab.common.definitions.instances import ComponentInstance, InstanceState
from leaklab.common.logging.logger import setup_logger
from leaklab.common.memory.allocation_simulator import AllocationSimulator

logger = setup_logger(__name__)


class LeakDetector:
    """
    Classifies blocks as leaked and keeps the running leaked total.

    A block is leaked when its owner is DESTROYED and the block was never
    released. Nothing is time based: the classification follows directly
    from the variant chosen at creation. Leaks only shrink through
    ``clear_leaked``; there is no automatic collection.
    """

    def __init__(self, simulator: AllocationSimulator):
        self._simulator = simulator
        self._leaked_ids: List[str] = []
        self._leaked_memory = 0
        self.total_cleared = 0
        self.total_cleared_bytes = 0

    def recompute(self, instances: Iterable[ComponentInstance]) -> int:
        leaked_ids = []
        leaked_memory = 0
        for instance in instances:
            if instance.state != InstanceState.DESTROYED:
                continue
            block = self._simulator.block_for(instance.id)
            if block is not None and not block.released:
                leaked_ids.append(instance.id)
                leaked_memory += block.size

        self._leaked_ids = leaked_ids
        self._leaked_memory = leaked_memory
        return leaked_memory

    @property
    def leaked_memory(self) -> int:
        return self._leaked_memory

    @property
    def leaked_count(self) -> int:
        return len(self._leaked_ids)

    def leaked_ids(self) -> List[str]:
        return list(self._leaked_ids)

    def clear_leaked(self) -> int:
        """Release every leaked block, like a manual garbage collection.

        Instances keep their ``leaked`` flag; only the blocks are reclaimed.

        Returns:
            int: Number of blocks cleared.
        """
        cleared = 0
        cleared_bytes = 0
        for owner_id in self._leaked_ids:
            block = self._simulator.block_for(owner_id)
            if self._simulator.release(owner_id, reclaimed=True):
                cleared += 1
                cleared_bytes += block.size

        self._leaked_ids = []
        self._leaked_memory = 0
        self.total_cleared += cleared
        self.total_cleared_bytes += cleared_bytes

        if cleared:
            logger.info(f"Cleared {cleared} leaked blocks ({cleared_bytes} bytes)")
        return cleared

    def is_over_threshold(self, limit: int) -> bool:
        if limit < 0:
            raise ValueError("Leak threshold cannot be negative")
        return self._leaked_memory > limit
