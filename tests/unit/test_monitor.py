import logging

import pytest

from leaklab import MemoryStats
from leaklab.common.metrics.stats_aggregator import StatsAggregator
from leaklab.common.scheduling import monitor as monitor_module
from leaklab.common.scheduling.monitor import MemoryMonitor


@pytest.fixture
def monitor_logs(caplog):
    # leaklab loggers do not propagate, hook caplog in directly
    monitor_module.logger.addHandler(caplog.handler)
    yield caplog
    monitor_module.logger.removeHandler(caplog.handler)


def _warnings(caplog):
    return [r for r in caplog.records if r.levelno == logging.WARNING]


class TestMemoryMonitor:

    def test_invalid_interval(self, registry):
        with pytest.raises(ValueError):
            MemoryMonitor(StatsAggregator(registry), interval=0)

    def test_warns_once_per_crossing(self, registry, monitor_logs):
        monitor = MemoryMonitor(StatsAggregator(registry))
        over = MemoryStats(leaked_memory=10, leak_warning=True)
        under = MemoryStats(leaked_memory=0, leak_warning=False)

        for stats in (over, over, over):
            monitor._check_threshold(stats)
        assert len(_warnings(monitor_logs)) == 1

        monitor._check_threshold(under)
        monitor._check_threshold(under)
        assert len(_warnings(monitor_logs)) == 1

        monitor._check_threshold(over)
        monitor._check_threshold(over)
        assert len(_warnings(monitor_logs)) == 2
