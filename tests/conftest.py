"""
Shared fixtures for salecountdown tests.

Provides:
- A manual time source pinned to a known instant
- A fake sleep that advances that time source instead of waiting
- A recorder for subscription callbacks
"""

import asyncio
import pytest
from typing import List

from salecountdown import CountdownCallbacks, CountdownScheduler, ManualTimeSource


# 2025-12-01T20:00:00Z
BASE_MS = 1_764_619_200_000


def pytest_configure(config):
    """Configure pytest with custom settings"""
    config.addinivalue_line("markers", "unit: Unit tests")


@pytest.fixture
def clock():
    """Manual time source starting at BASE_MS."""
    return ManualTimeSource(BASE_MS)


@pytest.fixture
def fake_sleep(clock):
    """
    Sleep replacement that advances the clock by the requested time.

    Requested durations are recorded in fake_sleep.calls.
    """
    calls: List[float] = []

    async def _sleep(seconds: float) -> None:
        calls.append(seconds)
        clock.advance(round(seconds * 1000))
        await asyncio.sleep(0)

    _sleep.calls = calls
    return _sleep


@pytest.fixture
def scheduler(clock, fake_sleep):
    """Scheduler driven by the manual clock."""
    return CountdownScheduler(time_source=clock, sleep=fake_sleep)


class CallbackRecorder:
    """Collects callback invocations in order."""

    def __init__(self):
        self.events: List[str] = []
        self.snapshots = []
        self.errors = []

    def callbacks(self, **overrides) -> CountdownCallbacks:
        handlers = dict(
            on_start=lambda: self.events.append("start"),
            on_urgent=lambda: self.events.append("urgent"),
            on_critical=lambda: self.events.append("critical"),
            on_expire=lambda: self.events.append("expire"),
            on_tick=self.snapshots.append,
            on_error=self.errors.append,
        )
        handlers.update(overrides)
        return CountdownCallbacks(**handlers)

    @property
    def edges(self) -> List[str]:
        return list(self.events)


@pytest.fixture
def recorder():
    """Fresh callback recorder."""
    return CallbackRecorder()
