#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

from functools import wraps
from typing import Callable, TypeVar

from leaklab.common.definitions.results import Result
from leaklab.common.metrics.tracker import LifecycleMetricsTracker

metrics = LifecycleMetricsTracker()

T = TypeVar('T')


def track_lifecycle(operation: str) -> Callable[[Callable[..., Result[T]]], Callable[..., Result[T]]]:
    """Decorator to track lifecycle operation rates.

    Wraps a function returning a ``Result`` and feeds its outcome into the
    global metrics tracker, logging throughput at regular intervals.

    Args:
        operation (str): Name of the tracked operation, ``"create"`` or ``"destroy"``.

    Example:
        >>> @track_lifecycle("create")
        ... def create(self, variant):
        ...     return self.registry.create(variant)
    """

    def decorator(func: Callable[..., Result[T]]) -> Callable[..., Result[T]]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Result[T]:
            result = func(*args, **kwargs)
            if metrics.update_metrics(operation, result.error):
                metrics.logger.info(
                    f"Lifecycle metrics | "
                    f"Creates: {metrics.creates_per_second:.2f}/s | "
                    f"Destroys: {metrics.destroys_per_second:.2f}/s | "
                    f"Refused: {metrics.window_refused} | "
                    f"Failed: {metrics.window_failures}"
                )
                metrics.reset_window()
            return result

        return wrapper

    return decorator
