"""Render PingWatch events as log file lines."""

from datetime import datetime
from functools import singledispatch

from pingwatch.config import MonitorConfig
from pingwatch.models import DropEvent, HighPingEvent, LossEndedEvent, LossStartedEvent

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
SEPARATOR = "=" * 60


def format_timestamp(ts: datetime) -> str:
    return ts.strftime(TIMESTAMP_FORMAT)


def format_latency(latency_ms: float) -> str:
    """Render a latency without a trailing '.0' for whole values."""
    return f"{latency_ms:g}"


def banner_lines(config: MonitorConfig, started_at: datetime) -> list[str]:
    """Startup banner written once before the first probe."""
    lines = [
        SEPARATOR,
        f"Starting pings to {config.target} - {format_timestamp(started_at)}",
        f"High ping threshold: {config.high_ping_threshold_ms} ms",
    ]
    if config.comment:
        lines.append(f"Comment: {config.comment}")
    lines.extend([SEPARATOR, ""])
    return lines


def shutdown_line(stopped_at: datetime) -> str:
    return f"Script stopped at: {format_timestamp(stopped_at)}"


@singledispatch
def event_lines(event, target: str) -> list[str]:
    """Return the log lines for one tracker event."""
    raise TypeError(f"Unsupported event type: {type(event).__name__}")


@event_lines.register
def _(event: DropEvent, target: str) -> list[str]:
    return [f"{format_timestamp(event.ts)}: Ping to {target} DROPPED."]


@event_lines.register
def _(event: LossStartedEvent, target: str) -> list[str]:
    return [f"{format_timestamp(event.ts)}: --- LOSS PERIOD STARTED ---"]


@event_lines.register
def _(event: LossEndedEvent, target: str) -> list[str]:
    return [
        f"{format_timestamp(event.ts)}: +++ LOSS PERIOD ENDED +++",
        f"    Duration (seconds): {event.duration_seconds:.2f}",
        f"    Total pings lost   : {event.count}",
        "",
    ]


@event_lines.register
def _(event: HighPingEvent, target: str) -> list[str]:
    return [
        f"{format_timestamp(event.ts)}: ERROR - High ping of {format_latency(event.latency_ms)} ms "
        f"to {target} (Threshold: {event.threshold_ms} ms)."
    ]
