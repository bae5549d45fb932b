"""
Test Configuration Module
"""

import pytest

from httpstat.config import get_settings
from httpstat.recorder import TimingRecorder


class ManualClock:
    """Nanosecond clock that only moves when told to, set in milliseconds"""

    def __init__(self):
        self.now = 0

    def __call__(self) -> int:
        return self.now

    def at(self, ms: float) -> "ManualClock":
        self.now = int(ms * 1_000_000)
        return self

    def advance(self, ms: float) -> "ManualClock":
        self.now += int(ms * 1_000_000)
        return self


@pytest.fixture
def clock():
    """Manual clock starting at 0 ms"""
    return ManualClock()


@pytest.fixture
def recorder(clock):
    """Recorder driven by the manual clock"""
    return TimingRecorder(clock=clock)


@pytest.fixture
def fresh_settings():
    """Drop cached settings before and after the test"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
