#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

import time
from dataclasses import dataclass, field
from typing import Optional

from leaklab.common.definitions.results import CapacityExceeded, LeakLabError
from leaklab.common.logging.logger import setup_logger


@dataclass
class LifecycleMetricsTracker:
    """Windowed rate tracker for lifecycle operations.

    Counts creates, destroys, capacity refusals and other failures inside a
    time window and tells the caller when a log line is due.

    Attributes:
        window_start (float): Start time of current metrics window.
        last_log_time (float): Time of last metrics log.
        log_interval (float): Seconds between metric logs.
        window_creates (int): Successful creates in the current window.
        window_destroys (int): Successful destroys in the current window.
        window_refused (int): Creates refused by the capacity cap in the current window.
        window_failures (int): Other failed operations (unknown id, double destroy).
    """

    logger = setup_logger(__file__)

    window_start: float = field(default_factory=time.time)
    last_log_time: float = field(default_factory=time.time)
    log_interval: float = 5.0  # sec between logs

    window_creates: int = 0
    window_destroys: int = 0
    window_refused: int = 0
    window_failures: int = 0

    @property
    def creates_per_second(self) -> float:
        elapsed = time.time() - self.window_start
        return self.window_creates / elapsed if elapsed > 0 else 0

    @property
    def destroys_per_second(self) -> float:
        elapsed = time.time() - self.window_start
        return self.window_destroys / elapsed if elapsed > 0 else 0

    def reset_window(self) -> None:
        current_time = time.time()
        self.last_log_time = current_time
        # reset window
        self.window_start = current_time
        self.window_creates = 0
        self.window_destroys = 0
        self.window_refused = 0
        self.window_failures = 0

    def update_metrics(self, operation: str, error: Optional[LeakLabError] = None) -> bool:
        """Count one operation outcome.

        Args:
            operation (str): ``"create"`` or ``"destroy"``.
            error (Optional[LeakLabError]): The failure carried by the result, None on success.

        Returns:
            bool: Whether metrics should be logged based on log interval.
        """
        if isinstance(error, CapacityExceeded):
            self.window_refused += 1
        elif error is not None:
            self.window_failures += 1
        elif operation == "create":
            self.window_creates += 1
        elif operation == "destroy":
            self.window_destroys += 1

        current_time = time.time()
        return current_time - self.last_log_time >= self.log_interval
