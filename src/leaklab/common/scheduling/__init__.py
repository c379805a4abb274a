from .monitor import MemoryMonitor
from .subscription import StatsSubscription
