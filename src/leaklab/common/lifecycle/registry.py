#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

import threading
from collections import deque
from typing import Deque, Dict, List, Optional

from leaklab.common.definitions.config import LeakLabConfig
from leaklab.common.definitions.events import EventKind, LifecycleEvent
from leaklab.common.definitions.instances import ComponentInstance, InstanceState, Variant
from leaklab.common.definitions.results import (
    CapacityExceeded,
    DoubleRelease,
    InstanceNotFound,
    Result,
)
from leaklab.common.lifecycle.capacity import CapacityGuard
from leaklab.common.logging.logger import setup_logger
from leaklab.common.memory.allocation_simulator import AllocationSimulator
from leaklab.common.memory.leak_detector import LeakDetector

logger = setup_logger(__name__)


class InstanceRegistry:
    """
    Authoritative set of component instances, live and destroyed.

    ``create`` and ``destroy`` are the only ways instance state changes. Each
    runs inside ``self.lock`` and updates the allocation simulator and the
    leak detector in the same critical section, so no reader holding the lock
    ever sees an instance without its block or a destroyed instance whose
    leak has not been counted yet.

    Destroyed instances are kept, which is what lets the detector find leaks
    after the fact.
    """

    def __init__(
            self,
            config: Optional[LeakLabConfig] = None,
            simulator: Optional[AllocationSimulator] = None,
            detector: Optional[LeakDetector] = None,
    ):
        self.config = config if config is not None else LeakLabConfig()
        self.simulator = simulator if simulator is not None else AllocationSimulator()
        self.detector = detector if detector is not None else LeakDetector(self.simulator)
        self.lock = threading.RLock()

        self._instances: Dict[str, ComponentInstance] = {}
        self._capacity = CapacityGuard(self.config.capacity)
        self._events: Deque[LifecycleEvent] = deque(maxlen=self.config.event_log_size)

    def create(self, variant: Variant, block_size: Optional[int] = None) -> Result[str]:
        """Create an ACTIVE instance of ``variant`` and allocate its block.

        Args:
            variant (Variant): Teardown behaviour of the new instance.
            block_size (Optional[int]): Bytes to allocate, ``config.default_block_size`` if None.

        Returns:
            Result[str]: The new instance id, or ``CapacityExceeded`` with nothing changed.

        Raises:
            ValueError: If ``block_size`` is not positive or ``variant`` is not a Variant.
        """
        if not isinstance(variant, Variant):
            raise ValueError(f"Unknown variant: {variant!r}")
        size = self.config.default_block_size if block_size is None else block_size
        if not isinstance(size, int) or size <= 0:
            raise ValueError(f"Block size must be a positive integer, got {size!r}")

        with self.lock:
            with self._capacity.reserve() as reserved:
                if not reserved:
                    error = CapacityExceeded(self._capacity.capacity)
                    logger.warning(f"Create refused: {error}")
                    self._record(EventKind.REJECTED, variant=variant, size=size, detail=str(error))
                    return Result.failure(error)

                instance = ComponentInstance(variant=variant, block_size=size)
                self.simulator.allocate(instance.id, size)
                self._instances[instance.id] = instance
                self.detector.recompute(self._instances.values())

            self._record(EventKind.CREATED, instance.id, variant, size)
            logger.debug(f"Created {variant.value} instance {instance.id} ({size} bytes)")
            return Result.success(instance.id)

    def destroy(self, instance_id: str) -> Result[None]:
        """Move an instance to DESTROYED.

        PROPER instances release their block. LEAKY instances skip teardown, so
        their block stays allocated and becomes a leak.

        Returns:
            Result[None]: ``InstanceNotFound`` for unknown ids, ``DoubleRelease`` if the
                instance was already destroyed. Neither failure changes any state.
        """
        with self.lock:
            instance = self._instances.get(instance_id)
            if instance is None:
                error = InstanceNotFound(instance_id)
                logger.error(f"Destroy failed: {error}")
                return Result.failure(error)
            if instance.state == InstanceState.DESTROYED:
                error = DoubleRelease(instance_id)
                logger.warning(f"Destroy ignored: {error}")
                return Result.failure(error)

            leaks = instance.variant == Variant.LEAKY
            if not leaks:
                self.simulator.release(instance_id)
            instance.mark_destroyed(leaked=leaks)
            self._capacity.release()
            self.detector.recompute(self._instances.values())

            self._record(
                EventKind.LEAKED if leaks else EventKind.DESTROYED,
                instance_id, instance.variant, instance.block_size,
            )
            if leaks:
                logger.info(
                    f"Instance {instance_id} destroyed without cleanup, "
                    f"{instance.block_size} bytes leaked"
                )
            return Result.success()

    def clear_leaked(self) -> int:
        """Run the manual GC over leaked blocks, under the registry lock."""
        with self.lock:
            cleared = self.detector.clear_leaked()
            self.detector.recompute(self._instances.values())
            if cleared:
                self._record(EventKind.CLEARED, detail=f"{cleared} blocks")
            return cleared

    def get(self, instance_id: str) -> Optional[ComponentInstance]:
        with self.lock:
            instance = self._instances.get(instance_id)
            return instance.snapshot() if instance is not None else None

    def list(
            self,
            variant: Optional[Variant] = None,
            state: Optional[InstanceState] = None,
    ) -> List[ComponentInstance]:
        """Detached copies of the instances, in creation order."""
        with self.lock:
            return [
                instance.snapshot() for instance in self._instances.values()
                if (variant is None or instance.variant == variant)
                and (state is None or instance.state == state)
            ]

    @property
    def active_count(self) -> int:
        return self._capacity.in_use

    @property
    def capacity(self) -> int:
        return self._capacity.capacity

    def record_event(self, kind: EventKind, detail: str = "") -> None:
        with self.lock:
            self._record(kind, detail=detail)

    def events(self, limit: Optional[int] = None) -> List[LifecycleEvent]:
        with self.lock:
            events = list(self._events)
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def _record(self, kind, instance_id=None, variant=None, size=0, detail=""):
        self._events.append(LifecycleEvent(
            kind=kind, instance_id=instance_id, variant=variant, size=size, detail=detail
        ))

    def __len__(self) -> int:
        return len(self._instances)

    def __contains__(self, instance_id: str) -> bool:
        return instance_id in self._instances
