"""Probe-classify-log loop driven by the Qt event loop."""

import logging
import signal
import sys
from collections.abc import Callable
from datetime import datetime

from PySide6.QtCore import QCoreApplication, QObject, QTimer, Signal

from pingwatch.config import MonitorConfig
from pingwatch.event_log import EventLog
from pingwatch.formatting import banner_lines, event_lines, shutdown_line
from pingwatch.models import Event
from pingwatch.prober import Prober
from pingwatch.prober_ping import PingProber
from pingwatch.tracker import LossTracker

logger = logging.getLogger(__name__)

# Lets Python signal handlers run while Qt waits between ticks
SIGNAL_POLL_MS = 200


class MonitorError(RuntimeError):
    """Raised when the monitor loop stopped because a tick failed."""


class MonitorLoop(QObject):
    """Runs one probe per tick against a single target.

    Each tick probes the target, feeds the outcome to the loss tracker and
    writes the resulting events to the event log. The next tick is scheduled
    with a single-shot timer only after the current one has finished, so the
    effective period is the interval plus the time spent probing.

    Single-threaded: the prober, tracker and event log are only touched from
    the Qt main thread.
    """

    event_emitted = Signal(object)  # Emits each tracker event after it is logged
    stopped = Signal()
    failed = Signal(str)  # Emits the error message of a failed tick

    def __init__(
        self,
        config: MonitorConfig,
        prober: Prober,
        event_log: EventLog,
        clock: Callable[[], datetime] = datetime.now,
        parent=None,
    ):
        super().__init__(parent)

        self.config = config
        self.prober = prober
        self.event_log = event_log
        self.clock = clock
        self.tracker = LossTracker(config.high_ping_threshold_ms)

        self.timer = QTimer(self)
        self.timer.setSingleShot(True)
        self.timer.timeout.connect(self._on_timeout)

        self.is_running = False
        self.tick_count = 0
        self.error: Exception | None = None

    def start(self):
        """Start ticking; the first probe runs as soon as the event loop does."""
        if self.is_running:
            return

        self.is_running = True
        self.timer.start(0)
        logger.info(
            "Monitoring started: target=%s, interval=%dms, threshold=%dms",
            self.config.target,
            self.config.interval_ms,
            self.config.high_ping_threshold_ms,
        )

    def stop(self):
        """Stop scheduling ticks. A tick already in progress is completed."""
        if not self.is_running:
            return

        self.is_running = False
        self.timer.stop()
        if self.tracker.in_loss:
            logger.info(
                "Stopping during an open loss period (%d pings lost so far); it will not be logged",
                self.tracker.open_period.count,
            )
        logger.info("Monitoring stopped after %d ticks", self.tick_count)
        self.stopped.emit()

    def tick(self) -> list[Event]:
        """Run one probe, classify it and log the resulting events."""
        outcome = self.prober.probe(self.config.target)
        now = self.clock()
        events = self.tracker.feed(outcome, now)

        for event in events:
            self.event_log.write_lines(event_lines(event, self.config.target))
            self.event_emitted.emit(event)

        self.tick_count += 1
        logger.debug(
            "Tick %d: loss=%s, latency=%s, events=%d",
            self.tick_count,
            outcome.loss,
            outcome.latency_ms,
            len(events),
        )
        return events

    def _on_timeout(self):
        if not self.is_running:
            return

        try:
            self.tick()
        except Exception as e:
            logger.exception("Tick failed: target=%s, error=%s", self.config.target, e)
            self.error = e
            self.failed.emit(str(e))
            self.stop()
            return

        if self.is_running:
            self.timer.start(self.config.interval_ms)


def _install_stop_handlers(request_stop: Callable[[], None]) -> dict:
    def handle(signum, frame):
        logger.info("Received %s, stopping", signal.Signals(signum).name)
        request_stop()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous[sig] = signal.signal(sig, handle)
    return previous


def _restore_handlers(previous: dict) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, handler)


def run_monitor(
    config: MonitorConfig,
    prober: Prober | None = None,
    event_log: EventLog | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> MonitorLoop:
    """Monitor config.target until SIGINT/SIGTERM or a failed tick.

    The event log is opened before anything else, so an unwritable path
    fails fast. Once the banner has been written, the shutdown line is
    written on every exit path.

    A stop request that arrives before the event loop runs is remembered;
    the monitor is only started from inside the event loop, and not at all
    once a stop has been requested.

    Returns:
        The stopped MonitorLoop

    Raises:
        EventLogError: If the log file cannot be opened
        MonitorError: If a tick raised; the shutdown line is written first
    """
    if prober is None:
        prober = PingProber(timeout_ms=config.timeout_ms)
    if event_log is None:
        event_log = EventLog(config.log_path)

    event_log.open()

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv[:1])

    monitor = MonitorLoop(config, prober, event_log, clock=clock)
    monitor.stopped.connect(app.quit)

    signal_poll = QTimer()
    signal_poll.timeout.connect(lambda: None)

    stop_requested = False

    def request_stop():
        nonlocal stop_requested
        stop_requested = True
        monitor.stop()
        # quit() is ignored outside exec(); start_unless_stopped covers that case
        app.quit()

    def start_unless_stopped():
        if stop_requested:
            app.quit()
        else:
            monitor.start()

    previous_handlers = _install_stop_handlers(request_stop)
    try:
        event_log.echo(f"Logging to: {event_log.path}")
        event_log.write_lines(banner_lines(config, clock()))
        event_log.echo("Press Ctrl+C to stop.")

        signal_poll.start(SIGNAL_POLL_MS)
        QTimer.singleShot(0, start_unless_stopped)
        app.exec()
    finally:
        signal_poll.stop()
        monitor.stop()
        _restore_handlers(previous_handlers)
        try:
            event_log.write(shutdown_line(clock()))
        except OSError:
            logger.exception("Could not write shutdown line to %s", event_log.path)
        finally:
            try:
                event_log.close()
            except OSError:
                logger.exception("Could not close event log %s", event_log.path)

    if monitor.error is not None:
        raise MonitorError(f"Monitoring of {config.target} failed: {monitor.error}") from monitor.error

    return monitor
