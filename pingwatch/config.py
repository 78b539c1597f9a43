"""Monitor configuration and interactive prompting."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_MS = 100
DEFAULT_INTERVAL_MS = 1000
DEFAULT_TIMEOUT_MS = 1000


class ConfigError(ValueError):
    """Raised when a monitor configuration value is invalid."""


@dataclass(frozen=True)
class MonitorConfig:
    """Settings for one monitoring session, fixed for the process lifetime.

    Attributes:
        target: Hostname or IP address to probe
        log_path: File that receives the event log (opened in append mode)
        high_ping_threshold_ms: Replies slower than this are logged as high ping
        comment: Optional free text written into the startup banner
        interval_ms: Pause between the end of one tick and the next probe
        timeout_ms: Per-probe timeout handed to the prober
    """

    target: str
    log_path: Path
    high_ping_threshold_ms: int = DEFAULT_THRESHOLD_MS
    comment: str | None = None
    interval_ms: int = DEFAULT_INTERVAL_MS
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def __post_init__(self):
        if not self.target or not self.target.strip():
            raise ConfigError("target must not be empty")
        if not str(self.log_path).strip():
            raise ConfigError("log_path must not be empty")
        if self.high_ping_threshold_ms <= 0:
            raise ConfigError("high_ping_threshold_ms must be positive")
        if self.interval_ms <= 0:
            raise ConfigError("interval_ms must be positive")
        if self.timeout_ms <= 0:
            raise ConfigError("timeout_ms must be positive")

        object.__setattr__(self, "target", self.target.strip())
        object.__setattr__(self, "log_path", Path(self.log_path))
        if self.comment is not None and not self.comment.strip():
            object.__setattr__(self, "comment", None)


def parse_threshold(raw: str | None, default: int = DEFAULT_THRESHOLD_MS) -> int:
    """Parse a high-ping threshold, falling back to the default.

    Blank input selects the default silently. Anything that is not a
    positive integer is logged and also replaced by the default.

    Examples:
        >>> parse_threshold("250")
        250
        >>> parse_threshold("")
        100
        >>> parse_threshold("fast")
        100
    """
    if raw is None or not raw.strip():
        return default

    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Invalid threshold %r, using default %d ms", raw, default)
        return default

    if value <= 0:
        logger.warning("Threshold must be positive (got %d), using default %d ms", value, default)
        return default

    return value


def _ask(input_fn: Callable[[str], str], prompt: str, required: bool = False) -> str:
    while True:
        answer = input_fn(prompt).strip()
        if answer or not required:
            return answer


def prompt_config(
    input_fn: Callable[[str], str] = input,
    target: str | None = None,
    log_path: str | None = None,
    threshold: str | None = None,
    comment: str | None = None,
    **overrides,
) -> MonitorConfig:
    """Build a MonitorConfig, asking the user for any value not supplied.

    Target and log file are required and re-asked until non-blank. Threshold
    and comment are optional; pass an empty string to skip their prompt.
    """
    if not target:
        target = _ask(input_fn, "Enter the IP address or hostname to ping: ", required=True)
    if not log_path:
        log_path = _ask(input_fn, "Enter the full path of the log file: ", required=True)
    if threshold is None:
        threshold = _ask(
            input_fn, f"Enter the high ping threshold in ms (default {DEFAULT_THRESHOLD_MS}): "
        )
    if comment is None:
        comment = _ask(input_fn, "Enter a comment for this session (optional): ")

    return MonitorConfig(
        target=target,
        log_path=Path(log_path),
        high_ping_threshold_ms=parse_threshold(threshold),
        comment=comment or None,
        **overrides,
    )
