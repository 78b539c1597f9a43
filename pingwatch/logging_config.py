"""Diagnostics logging configuration for PingWatch.

These are the program's own diagnostic messages on stderr. Monitoring
events go to the event log (see pingwatch.event_log), not here.
"""

import logging
import os
import sys

LOG_LEVEL_ENV = "PINGWATCH_LOG_LEVEL"

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def resolve_log_level(value: str | None) -> int:
    """Map a level name to a logging constant; unknown names give INFO."""
    return _LOG_LEVELS.get((value or "INFO").strip().upper(), logging.INFO)


def configure_logging() -> None:
    """Configure application-wide diagnostics logging.

    Respects the PINGWATCH_LOG_LEVEL environment variable (default: INFO).

    Examples:
        # Trace every probe
        $ PINGWATCH_LOG_LEVEL=DEBUG python -m pingwatch 8.8.8.8 -l ping.log

        # Only problems
        $ PINGWATCH_LOG_LEVEL=WARNING python -m pingwatch 8.8.8.8 -l ping.log
    """
    log_level = resolve_log_level(os.environ.get(LOG_LEVEL_ENV))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s", logging.getLevelName(log_level)
    )
