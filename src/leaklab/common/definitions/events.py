#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from leaklab.common.definitions.instances import Variant


class EventKind(Enum):
    CREATED = "created"
    DESTROYED = "destroyed"
    LEAKED = "leaked"
    REJECTED = "rejected"
    CLEARED = "cleared"
    MODE_SWITCHED = "mode_switched"


@dataclass(frozen=True)
class LifecycleEvent:
    """One line of the demo event log"""
    kind: EventKind
    instance_id: Optional[str] = None
    variant: Optional[Variant] = None
    size: int = 0
    detail: str = ""
    timestamp: float = field(default_factory=time.monotonic)
