"""ICMP echo prober for PingWatch using the system ping command."""

import logging
import platform
import re
import subprocess
from math import ceil

from pingwatch.models import ProbeOutcome

logger = logging.getLogger(__name__)

# Windows reports sub-resolution replies as "time<1ms"
_LESS_THAN_PATTERN = re.compile(r"time<(\d+)", re.IGNORECASE)
_LATENCY_PATTERN = re.compile(r"time\s*=\s*(\d+(?:\.\d+)?)\s*ms", re.IGNORECASE)


def parse_ping_latency_ms(output: str | None) -> float | None:
    """Extract the round-trip time from ping output.

    Understands the Linux/macOS form "time=12.3 ms" and the Windows forms
    "time=12ms" and "time<1ms". A "time<N" reply is reported as N/2.

    Args:
        output: Raw stdout of a single-echo ping invocation

    Returns:
        Latency in milliseconds, or None when no reply time is present

    Examples:
        >>> parse_ping_latency_ms("64 bytes from 10.0.0.1: icmp_seq=1 ttl=64 time=12.3 ms")
        12.3
        >>> parse_ping_latency_ms("Reply from 10.0.0.1: bytes=32 time<1ms TTL=128")
        0.5
        >>> parse_ping_latency_ms("Request timed out.") is None
        True
    """
    if not output:
        return None

    match = _LESS_THAN_PATTERN.search(output)
    if match:
        return float(match.group(1)) / 2.0

    match = _LATENCY_PATTERN.search(output)
    if match:
        return float(match.group(1))

    return None


class PingProber:
    """Prober that sends one ICMP echo per call through the OS ping binary.

    Works on Windows, Linux and macOS. Every way a probe can go wrong
    (non-zero exit, timeout, unparseable output, missing ping binary) is
    reported as a failure outcome.

    Parsing depends on the English keyword "time"; localized Windows output
    ("Zeit=", "temps=") is reported as a drop.
    """

    def __init__(self, timeout_ms: int = 1000):
        """Initialize the prober.

        Args:
            timeout_ms: How long to wait for an echo reply, in milliseconds.
        """
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

        self.timeout_ms = timeout_ms
        self.timeout_seconds = timeout_ms / 1000.0
        self.system = platform.system()

        logger.debug("PingProber initialized: timeout_ms=%d, system=%s", timeout_ms, self.system)

    def probe(self, host: str) -> ProbeOutcome:
        """Send one echo request to host and classify the reply."""
        if not host or not host.strip():
            return ProbeOutcome.failure(host)

        cmd = self.build_command(host)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                # ping enforces its own deadline; this guards against a hung child
                timeout=self.timeout_seconds + 0.5,
                shell=False,
                **self.process_group_kwargs(),
            )
        except subprocess.TimeoutExpired:
            logger.debug("Ping timeout: host=%s, timeout=%.1fs", host, self.timeout_seconds)
            return ProbeOutcome.failure(host)
        except Exception as e:
            logger.warning("Ping error: host=%s, error=%s", host, e, exc_info=True)
            return ProbeOutcome.failure(host)

        if result.returncode != 0:
            logger.debug("Ping failed: host=%s, returncode=%d", host, result.returncode)
            return ProbeOutcome.failure(host)

        latency = parse_ping_latency_ms(result.stdout)
        if latency is None:
            logger.debug(
                "Unparseable ping output: host=%s, output_preview=%s",
                host,
                result.stdout[:100] if result.stdout else "(empty)",
            )
            return ProbeOutcome.failure(host)

        logger.debug("Ping reply: host=%s, latency=%.2fms", host, latency)
        return ProbeOutcome.success(host, latency)

    def build_command(self, host: str) -> list[str]:
        """Build the single-echo ping command line for this platform."""
        if self.system == "Windows":
            return ["ping", "-n", "1", "-w", str(self.timeout_ms), host]

        if self.system == "Linux":
            # -W takes whole seconds
            return ["ping", "-c", "1", "-W", str(max(1, ceil(self.timeout_seconds))), host]

        # macOS/BSD -W has different units; the subprocess timeout bounds the call
        return ["ping", "-c", "1", host]

    def process_group_kwargs(self) -> dict:
        """Keep ping out of the terminal's process group.

        A Ctrl+C meant for the monitor must not also kill an in-flight ping
        and turn it into a drop.
        """
        if self.system == "Windows":
            return {"creationflags": getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0x200)}
        return {"start_new_session": True}
