#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional


class Variant(Enum):
    """How a component behaves when it is torn down"""
    LEAKY = "leaky"    # skips teardown, its block stays allocated
    PROPER = "proper"  # releases its block on destroy


class InstanceState(Enum):
    """Enum of states for a component instance"""
    ACTIVE = "ACTIVE"
    DESTROYED = "DESTROYED"


class ViewMode(Enum):
    """Which demo view drives ``create`` when no variant is given."""
    LEAKY = "leaky"
    PROPER = "proper"
    COMPARISON = "comparison"

    def variants(self) -> List[Variant]:
        if self is ViewMode.LEAKY:
            return [Variant.LEAKY]
        if self is ViewMode.PROPER:
            return [Variant.PROPER]
        return [Variant.LEAKY, Variant.PROPER]


def new_instance_id() -> str:
    return uuid.uuid4().hex


@dataclass
class ComponentInstance:
    """
    A tracked component with an ACTIVE -> DESTROYED lifecycle.

    Attributes:
        id (str): Unique identifier, assigned by the registry.
        variant (Variant): Teardown behaviour chosen at creation.
        block_size (int): Size in bytes of the simulated block the instance owns.
        created_at (float): ``time.monotonic()`` at creation.
        state (InstanceState): Current lifecycle state, never reverts once DESTROYED.
        destroyed_at (Optional[float]): ``time.monotonic()`` at destruction.
        leaked (bool): Set when the instance was destroyed without releasing its block.
            Stays set even after the manual GC reclaims that block.
    """
    variant: Variant
    block_size: int
    id: str = field(default_factory=new_instance_id)
    created_at: float = field(default_factory=time.monotonic)
    state: InstanceState = InstanceState.ACTIVE
    destroyed_at: Optional[float] = None
    leaked: bool = False

    @property
    def is_active(self) -> bool:
        return self.state == InstanceState.ACTIVE

    @property
    def lifetime(self) -> float:
        """Seconds between creation and destruction (or now, while active)."""
        end = self.destroyed_at if self.destroyed_at is not None else time.monotonic()
        return end - self.created_at

    def mark_destroyed(self, leaked: bool) -> None:
        if self.state == InstanceState.DESTROYED:
            raise RuntimeError(f"Instance {self.id} is already destroyed")
        self.state = InstanceState.DESTROYED
        self.destroyed_at = time.monotonic()
        self.leaked = leaked

    def snapshot(self) -> 'ComponentInstance':
        """Detached copy handed out to callers so they cannot mutate registry state."""
        return replace(self)
