"""Shared fixtures for PingWatch tests."""

import io
from datetime import datetime, timedelta

import pytest
from PySide6.QtCore import QCoreApplication

from pingwatch.config import MonitorConfig
from pingwatch.event_log import EventLog
from pingwatch.models import ProbeOutcome


class ScriptedProber:
    """Prober that replays a fixed list of outcomes.

    Entries are either a latency in ms (success), None (drop), or an
    exception instance to raise. Once the script runs out, on_exhausted is
    called (if set) and a drop is returned.
    """

    def __init__(self, script, on_exhausted=None):
        self._script = list(script)
        self.on_exhausted = on_exhausted
        self.calls = []

    def probe(self, host: str) -> ProbeOutcome:
        self.calls.append(host)
        if not self._script:
            if self.on_exhausted is not None:
                self.on_exhausted()
            return ProbeOutcome.failure(host)

        step = self._script.pop(0)
        if isinstance(step, Exception):
            raise step
        if step is None:
            return ProbeOutcome.failure(host)
        return ProbeOutcome.success(host, step)


class SteppingClock:
    """Clock that advances by a fixed step on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture(scope="session")
def qapp():
    """Create QCoreApplication instance for tests."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def clock():
    return SteppingClock(datetime(2024, 3, 1, 12, 0, 0))


@pytest.fixture
def config(tmp_path):
    return MonitorConfig(
        target="192.0.2.10",
        log_path=tmp_path / "ping.log",
        high_ping_threshold_ms=100,
        comment="office uplink",
        interval_ms=10,
    )


@pytest.fixture
def console():
    return io.StringIO()


@pytest.fixture
def event_log(config, console):
    log = EventLog(config.log_path, console=console)
    yield log
    log.close()
