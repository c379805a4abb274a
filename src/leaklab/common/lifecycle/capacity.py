#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

from contextlib import contextmanager

from leaklab.common.logging.logger import setup_logger


class CapacityGuard:
    """
    A counting guard on live instances.

    Unlike a semaphore it never blocks: a create beyond capacity is refused
    immediately. Callers serialize access through the registry lock.
    """

    def __init__(self, capacity: int):
        if not isinstance(capacity, int) or capacity <= 0:
            raise ValueError("Capacity must be a positive integer")
        self._capacity = capacity
        self.remaining = capacity
        self.logger = setup_logger(__file__)

    def acquire_nowait(self, requested: int = 1) -> bool:
        """
        Try to take ``requested`` slots without waiting.
        """
        if not isinstance(requested, int) or requested <= 0:
            raise ValueError("You must request at least one slot.")
        if requested > self._capacity:
            raise ValueError(f"Request ({requested}) exceeds maximum capacity ({self._capacity}).")

        if self.remaining < requested:
            self.logger.debug(f"Capacity full: {self.in_use}/{self._capacity}")
            return False
        self.remaining -= requested
        return True

    def release(self, amount: int = 1) -> None:
        """
        Give back ``amount`` slots.
        """
        if not isinstance(amount, int) or amount <= 0:
            raise ValueError("You must release at least one slot.")
        if self.remaining + amount > self._capacity:
            raise ValueError("Releasing more slots than were acquired")
        self.remaining += amount

    @property
    def capacity(self) -> int:
        """Returns the capacity of the guard."""
        return self._capacity

    @property
    def in_use(self) -> int:
        return self._capacity - self.remaining

    @contextmanager
    def reserve(self, amount: int = 1):
        """
        Hold ``amount`` slots and hand them back if the block raises.

        Yields False (and holds nothing) when the slots are not available.
        """
        acquired = self.acquire_nowait(amount)
        try:
            yield acquired
        except BaseException:
            if acquired:
                self.release(amount)
            raise
