import pytest

from leaklab import LeakLab, LeakLabConfig
from leaklab.common.lifecycle.registry import InstanceRegistry

MB = 1024 * 1024


@pytest.fixture
def config():
    return LeakLabConfig(capacity=100, default_block_size=MB, leak_warning_threshold=3 * MB, sample_interval=0.01)


@pytest.fixture
def registry(config):
    return InstanceRegistry(config)


@pytest.fixture
def lab(config):
    return LeakLab(config)
