"""Entry point for PingWatch."""

import argparse
import logging
import os
import shutil
import sys
from pathlib import Path

from pingwatch.config import (
    DEFAULT_INTERVAL_MS,
    DEFAULT_THRESHOLD_MS,
    DEFAULT_TIMEOUT_MS,
    ConfigError,
    MonitorConfig,
    parse_threshold,
    prompt_config,
)
from pingwatch.event_log import EventLogError
from pingwatch.logging_config import configure_logging
from pingwatch.monitor import MonitorError, run_monitor
from pingwatch.prober import FakeProber, Prober
from pingwatch.prober_ping import PingProber

logger = logging.getLogger(__name__)

PROBER_ENV = "PINGWATCH_PROBER"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pingwatch",
        description="Ping a host every second and log dropped pings, loss periods and high pings.",
    )
    parser.add_argument("target", nargs="?", help="IP address or hostname to ping (prompted if omitted)")
    parser.add_argument("-l", "--log-file", help="File to append events to (prompted if omitted)")
    parser.add_argument(
        "-t",
        "--threshold",
        help=f"High ping threshold in ms (default: {DEFAULT_THRESHOLD_MS})",
    )
    parser.add_argument("-c", "--comment", help="Comment written into the startup banner")
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=DEFAULT_INTERVAL_MS,
        help=f"Pause between probes in ms (default: {DEFAULT_INTERVAL_MS})",
    )
    parser.add_argument(
        "--timeout-ms",
        type=int,
        default=DEFAULT_TIMEOUT_MS,
        help=f"Per-probe timeout in ms (default: {DEFAULT_TIMEOUT_MS})",
    )
    return parser


def build_config(args: argparse.Namespace, input_fn=input) -> MonitorConfig:
    """Turn parsed arguments into a MonitorConfig, prompting for what is missing."""
    overrides = {"interval_ms": args.interval_ms, "timeout_ms": args.timeout_ms}

    if not args.target or not args.log_file:
        return prompt_config(
            input_fn,
            target=args.target,
            log_path=args.log_file,
            threshold=args.threshold,
            comment=args.comment,
            **overrides,
        )

    return MonitorConfig(
        target=args.target,
        log_path=Path(args.log_file),
        high_ping_threshold_ms=parse_threshold(args.threshold),
        comment=args.comment,
        **overrides,
    )


def select_prober(config: MonitorConfig) -> Prober:
    """Pick the prober: the system ping, or the simulator when requested.

    Raises:
        OSError: If the ping command is not available
    """
    if os.environ.get(PROBER_ENV, "").lower() == "fake":
        logger.info("Using FakeProber (%s=fake)", PROBER_ENV)
        return FakeProber()

    if shutil.which("ping") is None:
        raise OSError("ping command not found on PATH")

    return PingProber(timeout_ms=config.timeout_ms)


def main(argv: list[str] | None = None, input_fn=input) -> int:
    """Main entry point; returns the process exit code."""
    configure_logging()
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args, input_fn)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except (EOFError, KeyboardInterrupt):
        print("\nAborted before monitoring started.", file=sys.stderr)
        return EXIT_USAGE

    try:
        prober = select_prober(config)
    except OSError as e:
        logger.error("Ping unavailable: %s", e)
        print(f"Error: {e}. Set {PROBER_ENV}=fake to run with simulated pings.", file=sys.stderr)
        return EXIT_USAGE

    try:
        run_monitor(config, prober=prober)
    except EventLogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except MonitorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
