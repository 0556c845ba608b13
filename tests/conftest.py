"""Shared fixtures: a controllable clock and GcLogger instances writing to buffers."""

import io
from datetime import datetime, timedelta

import pytest

from gclog.rotation import RotationPolicy
from gclog.writer import GcLogger


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    """Clock fixed at 2018-04-08 16:10 local time."""
    return FakeClock(datetime(2018, 4, 8, 16, 10, 0))


@pytest.fixture
def console():
    """Buffer standing in for stderr."""
    return io.StringIO()


@pytest.fixture
def service(clock, console):
    """GcLogger with hourly rotation, one day retention and a fake clock."""
    policy = RotationPolicy(slice_interval=timedelta(hours=1), storage_time=timedelta(days=1))
    service = GcLogger(policy=policy, clock=clock, console=console)
    yield service
    service.close_file()


@pytest.fixture
def log_path(tmp_path):
    """Path of the live log file inside a temporary directory."""
    return str(tmp_path / "app.log")
