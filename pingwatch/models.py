"""Data models for PingWatch probes, loss periods and log events."""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta


@dataclass
class ProbeOutcome:
    """Result of a single reachability probe."""

    host: str
    latency_ms: float | None  # None indicates a dropped probe
    loss: bool

    def __post_init__(self):
        """Keep latency_ms and loss consistent with each other."""
        if self.loss:
            self.latency_ms = None
        elif self.latency_ms is None:
            self.loss = True
        elif self.latency_ms < 0:
            raise ValueError("latency_ms must be non-negative")

    @classmethod
    def success(cls, host: str, latency_ms: float) -> "ProbeOutcome":
        return cls(host=host, latency_ms=latency_ms, loss=False)

    @classmethod
    def failure(cls, host: str) -> "ProbeOutcome":
        return cls(host=host, latency_ms=None, loss=True)


@dataclass(frozen=True)
class LossPeriod:
    """A contiguous run of dropped probes."""

    start_time: datetime
    count: int = 1

    def __post_init__(self):
        if self.count < 1:
            raise ValueError("a loss period holds at least one drop")

    def with_drop(self) -> "LossPeriod":
        """Return this period extended by one more drop."""
        return replace(self, count=self.count + 1)


@dataclass(frozen=True)
class DropEvent:
    ts: datetime


@dataclass(frozen=True)
class LossStartedEvent:
    ts: datetime


@dataclass(frozen=True)
class LossEndedEvent:
    ts: datetime
    duration: timedelta
    count: int

    @property
    def duration_seconds(self) -> float:
        return self.duration.total_seconds()


@dataclass(frozen=True)
class HighPingEvent:
    ts: datetime
    latency_ms: float
    threshold_ms: int


Event = DropEvent | LossStartedEvent | LossEndedEvent | HighPingEvent
