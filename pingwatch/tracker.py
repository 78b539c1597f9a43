"""Loss-period tracking state machine.

The tracker is either idle or inside a loss period. Each probe outcome is
fed through ``advance``, a pure function that returns the next state and
the events to log for this tick:

    idle    + failure -> in loss  (drop, loss started)
    in loss + failure -> in loss  (drop)
    in loss + success -> idle     (loss ended)
    idle    + success -> idle

Every success is additionally checked against the high-ping threshold,
after any loss events, without touching loss state.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from pingwatch.models import (
    DropEvent,
    Event,
    HighPingEvent,
    LossEndedEvent,
    LossPeriod,
    LossStartedEvent,
    ProbeOutcome,
)


@dataclass(frozen=True)
class TrackerState:
    """Loss-tracking state between ticks; open_period is None when idle."""

    open_period: LossPeriod | None = None

    @property
    def in_loss(self) -> bool:
        return self.open_period is not None


IDLE = TrackerState()


def advance(
    state: TrackerState,
    outcome: ProbeOutcome,
    now: datetime,
    threshold_ms: int,
) -> tuple[TrackerState, list[Event]]:
    """Apply one probe outcome to the tracker state.

    Args:
        state: State before this tick
        outcome: Result of this tick's probe
        now: Timestamp of this tick
        threshold_ms: High-ping threshold; only latencies strictly above it are flagged

    Returns:
        Tuple of (next state, events in emission order)
    """
    events: list[Event] = []

    if outcome.loss:
        events.append(DropEvent(now))
        if state.open_period is None:
            events.append(LossStartedEvent(now))
            return TrackerState(LossPeriod(start_time=now)), events
        return TrackerState(state.open_period.with_drop()), events

    if state.open_period is not None:
        period = state.open_period
        # A wall-clock step backwards must not yield a negative duration
        duration = max(now - period.start_time, timedelta(0))
        events.append(LossEndedEvent(now, duration, period.count))
        state = IDLE

    if outcome.latency_ms > threshold_ms:
        events.append(HighPingEvent(now, outcome.latency_ms, threshold_ms))

    return state, events


class LossTracker:
    """Owns the tracker state for one monitoring session."""

    def __init__(self, threshold_ms: int):
        if threshold_ms <= 0:
            raise ValueError("threshold_ms must be positive")
        self.threshold_ms = threshold_ms
        self._state = IDLE

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def in_loss(self) -> bool:
        return self._state.in_loss

    @property
    def open_period(self) -> LossPeriod | None:
        return self._state.open_period

    def feed(self, outcome: ProbeOutcome, now: datetime) -> list[Event]:
        """Advance the state with one outcome and return the events it produced."""
        self._state, events = advance(self._state, outcome, now, self.threshold_ms)
        return events
