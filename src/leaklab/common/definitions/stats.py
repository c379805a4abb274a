#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

import time
from dataclasses import dataclass, field, asdict
from typing import Dict, Any

_UNITS = ('B', 'KB', 'MB', 'GB', 'TB')


def format_bytes(size: int) -> str:
    """Human readable byte count, binary multiples (1 MB == 1024 ** 2 bytes)."""
    value = float(size)
    for unit in _UNITS:
        if abs(value) < 1024 or unit == _UNITS[-1]:
            if unit == 'B':
                return f"{int(value)} {unit}"
            return f"{value:.2f} {unit}"
        value /= 1024
    return f"{size} B"


@dataclass(frozen=True)
class MemoryStats:
    """Immutable point-in-time snapshot of the memory accounting.

    Attributes:
        total_allocated (int): Bytes ever allocated to component instances.
        current_usage (int): ``total_allocated`` minus every released block.
        leaked_memory (int): Bytes held by destroyed instances whose block was never released.
        component_count (int): Number of ACTIVE instances.
        leak_warning (bool): Whether ``leaked_memory`` is over the configured warning threshold.
        sampled_at (float): ``time.monotonic()`` when the snapshot was taken.
    """
    total_allocated: int = 0
    current_usage: int = 0
    leaked_memory: int = 0
    component_count: int = 0
    leak_warning: bool = False
    sampled_at: float = field(default_factory=time.monotonic)

    @property
    def released_memory(self) -> int:
        return self.total_allocated - self.current_usage

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def describe(self) -> str:
        return (
            f"Allocated: {format_bytes(self.total_allocated)} | "
            f"In use: {format_bytes(self.current_usage)} | "
            f"Leaked: {format_bytes(self.leaked_memory)} | "
            f"Components: {self.component_count}"
        )


@dataclass(frozen=True)
class VariantBreakdown:
    """Per-variant counters shown side by side in the comparison view"""
    active: int = 0
    destroyed: int = 0
    leaked_blocks: int = 0
    leaked_memory: int = 0
