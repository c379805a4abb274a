#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

from typing import Dict, List, Optional

import numpy as np

from leaklab.common.definitions.memory import MemoryBlock
from leaklab.common.logging.logger import setup_logger

logger = setup_logger(__name__)


class AllocationSimulator:
    """
    Bookkeeping for simulated memory blocks, one per component instance.

    Nothing is really allocated: a block is a size and a released flag. Blocks
    are never forgotten once allocated, so ``total_allocated`` only grows and
    ``current_usage`` is always ``total_allocated`` minus the released sizes.
    The simulator knows nothing about instance state; the registry decides
    when to allocate and when to release.
    """

    def __init__(self):
        self._blocks: Dict[str, MemoryBlock] = {}

    def allocate(self, owner_id: str, size: int) -> MemoryBlock:
        if size <= 0:
            raise ValueError(f"Block size must be positive, got {size}")
        if owner_id in self._blocks:
            raise ValueError(f"Owner {owner_id} already holds a block")

        block = MemoryBlock(owner_id=owner_id, size=size)
        self._blocks[owner_id] = block
        logger.debug(f"Allocated {size} bytes for {owner_id}")
        return block

    def release(self, owner_id: str, reclaimed: bool = False) -> bool:
        """Mark the block of ``owner_id`` released.

        Unknown owners and already released blocks are ignored.

        Returns:
            bool: Whether a block was actually released by this call.
        """
        block = self._blocks.get(owner_id)
        if block is None:
            return False
        released = block.mark_released(reclaimed=reclaimed)
        if released:
            logger.debug(f"Released {block.size} bytes of {owner_id}")
        return released

    def block_for(self, owner_id: str) -> Optional[MemoryBlock]:
        return self._blocks.get(owner_id)

    def blocks(self) -> List[MemoryBlock]:
        return list(self._blocks.values())

    def _sizes(self, released: Optional[bool] = None) -> np.ndarray:
        sizes = [
            b.size for b in self._blocks.values()
            if released is None or b.released == released
        ]
        return np.asarray(sizes, dtype=np.int64)

    def total_allocated(self) -> int:
        return int(self._sizes().sum())

    def released_total(self) -> int:
        return int(self._sizes(released=True).sum())

    def current_usage(self) -> int:
        return int(self._sizes(released=False).sum())

    def get_stats(self) -> Dict:
        active = self._sizes(released=False)
        return {
            'total_allocated': self.total_allocated(),
            'current_usage': int(active.sum()),
            'active_blocks': int(active.size),
            'released_blocks': len(self._blocks) - int(active.size),
        }

    def __len__(self) -> int:
        return len(self._blocks)
