#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar('T')


class LeakLabError(Exception):
    """Base class for recoverable lifecycle errors reported to the caller."""


class InstanceNotFound(LeakLabError):
    """``destroy`` was called with an id the registry never issued."""

    def __init__(self, instance_id: str):
        self.instance_id = instance_id
        super().__init__(f"Instance {instance_id} not found")


class DoubleRelease(LeakLabError):
    """``destroy`` was called on an instance that is already destroyed."""

    def __init__(self, instance_id: str):
        self.instance_id = instance_id
        super().__init__(f"Instance {instance_id} is already destroyed")


class CapacityExceeded(LeakLabError):
    """``create`` was refused because the live-instance cap is reached."""

    def __init__(self, capacity: int):
        self.capacity = capacity
        super().__init__(f"Capacity of {capacity} live instances reached")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a core operation.

    Lifecycle failures are returned, not raised, so a UI can render them
    directly. ``unwrap`` turns a failure back into an exception for callers
    that prefer one.

    Examples:
        result = lab.create(Variant.LEAKY)
        if result:
            instance_id = result.value
        else:
            show_warning(result.message)
    """
    value: Optional[T] = None
    error: Optional[LeakLabError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> 'Result[T]':
        return cls(value=value)

    @classmethod
    def failure(cls, error: LeakLabError) -> 'Result[T]':
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else ""

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        return self.ok
