#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.
import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class MemoryBlock:
    """Simulated allocation bound to one component instance"""
    owner_id: str
    size: int
    allocated_at: float = field(default_factory=time.monotonic)
    released: bool = False
    released_at: Optional[float] = None
    # released by the manual GC instead of by the owner's teardown
    reclaimed: bool = False

    def mark_released(self, reclaimed: bool = False) -> bool:
        if self.released:
            return False
        self.released = True
        self.released_at = time.monotonic()
        self.reclaimed = reclaimed
        return True
