"""Prober abstraction and a simulated prober for demos and tests."""

import random
from typing import Protocol

from pingwatch.models import ProbeOutcome


class Prober(Protocol):
    """Issues one reachability probe against a host.

    Implementations report an unreachable host as a failure outcome and
    never raise for network conditions.
    """

    def probe(self, host: str) -> ProbeOutcome:
        ...


class FakeProber:
    """Generates simulated probe outcomes, including bursts of loss."""

    def __init__(self, seed: int | None = None):
        """Initialize with optional random seed for deterministic behavior."""
        self._random = random.Random(seed)

        # Simulation parameters
        self.base_latency = 25.0  # Base latency in ms
        self.latency_variance = 5.0
        self.spike_probability = 0.05
        self.spike_multiplier = 6.0  # Spikes land well above the default threshold
        self.outage_probability = 0.02  # Chance that a loss burst begins
        self.outage_max_length = 5

        self._outage_remaining = 0

    def probe(self, host: str) -> ProbeOutcome:
        if not host or not host.strip():
            return ProbeOutcome.failure(host)

        if self._outage_remaining == 0 and self._random.random() < self.outage_probability:
            self._outage_remaining = self._random.randint(1, self.outage_max_length)

        if self._outage_remaining > 0:
            self._outage_remaining -= 1
            return ProbeOutcome.failure(host)

        latency = self.base_latency + self._random.gauss(0, self.latency_variance)
        if self._random.random() < self.spike_probability:
            latency *= self.spike_multiplier

        return ProbeOutcome.success(host, round(max(0.1, latency), 2))
