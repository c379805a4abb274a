#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

from .common.logging.logger import setup_logger, set_logging_level
from .common.definitions.config import LeakLabConfig
from .common.definitions.instances import ComponentInstance, InstanceState, Variant, ViewMode
from .common.definitions.results import (
    CapacityExceeded,
    DoubleRelease,
    InstanceNotFound,
    LeakLabError,
    Result,
)
from .common.definitions.stats import MemoryStats, VariantBreakdown, format_bytes
from .core.leak_lab import LeakLab

__version__ = '0.1.0'
