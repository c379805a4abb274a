#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

MB = 1024 * 1024


@dataclass(frozen=True)
class LeakLabConfig:
    """Static configuration supplied when the core is built.

    Attributes:
        capacity (int): Maximum number of live (ACTIVE) instances.
        default_block_size (int): Bytes allocated per instance when ``create`` gets no size.
        leak_warning_threshold (int): Leaked bytes above which stats carry a warning.
        sample_interval (float): Default seconds between pushed snapshots.
        event_log_size (int): Number of lifecycle events kept in the log.
        log_level (Optional[str]): Level applied to every leaklab logger in the process.
            Left untouched when None.
    """
    capacity: int = 100
    default_block_size: int = MB
    leak_warning_threshold: int = 10 * MB
    sample_interval: float = 1.0
    event_log_size: int = 200
    log_level: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.capacity, int) or self.capacity <= 0:
            raise ValueError("capacity must be a positive integer")
        if not isinstance(self.default_block_size, int) or self.default_block_size <= 0:
            raise ValueError("default_block_size must be a positive integer")
        if self.leak_warning_threshold < 0:
            raise ValueError("leak_warning_threshold cannot be negative")
        if self.sample_interval <= 0:
            raise ValueError("sample_interval must be positive")
        if self.event_log_size <= 0:
            raise ValueError("event_log_size must be positive")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'LeakLabConfig':
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'LeakLabConfig':
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        if "LEAKLAB_CAPACITY" in env:
            values["capacity"] = int(env["LEAKLAB_CAPACITY"])
        if "LEAKLAB_BLOCK_SIZE" in env:
            values["default_block_size"] = int(env["LEAKLAB_BLOCK_SIZE"])
        if "LEAKLAB_LEAK_WARNING_THRESHOLD" in env:
            values["leak_warning_threshold"] = int(env["LEAKLAB_LEAK_WARNING_THRESHOLD"])
        if "LEAKLAB_SAMPLE_INTERVAL" in env:
            values["sample_interval"] = float(env["LEAKLAB_SAMPLE_INTERVAL"])
        if "LEAKLAB_EVENT_LOG_SIZE" in env:
            values["event_log_size"] = int(env["LEAKLAB_EVENT_LOG_SIZE"])
        if "LEAKLAB_LOG_LEVEL" in env:
            values["log_level"] = env["LEAKLAB_LOG_LEVEL"]
        return cls(**values)
