"""Metrics collector: Prometheus counters, gauges, histograms.

- ``relay_cycles_total`` counter-vec  (result: ok, error)
- ``relay_deliveries_total`` counter-vec  (result: succeeded, failed)
- ``relay_cycle_duration_seconds`` histogram
- ``relay_last_cycle_timestamp`` gauge
- ``relay_last_price`` gauge  (price relayed by the last dispatched cycle)
- ``relay_subscribers`` gauge  (attempted deliveries of the last dispatched cycle)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator

    from price_relay.relay.models import CycleOutcome


_PREFIX = "relay"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`RelayMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def gauge(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Gauge:
        """Register and return a Gauge."""
        return Gauge(name, doc, labels, registry=self._registry)

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class RelayMetrics:
    """High-level metrics for the relay loop."""

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._cycles = self._collector.counter(
            f"{_PREFIX}_cycles",
            "Relay cycles by result",
            ("result",),
        )
        self._deliveries = self._collector.counter(
            f"{_PREFIX}_deliveries",
            "Webhook delivery attempts by result",
            ("result",),
        )
        self._cycle_duration = self._collector.histogram(
            f"{_PREFIX}_cycle_duration_seconds",
            "Duration of relay cycles",
        )
        self._last_cycle = self._collector.gauge(
            f"{_PREFIX}_last_cycle_timestamp",
            "Unix timestamp of the last finished cycle",
        )
        self._subscribers = self._collector.gauge(
            f"{_PREFIX}_subscribers",
            "Subscribers attempted in the last dispatched cycle",
        )
        self._last_price = self._collector.gauge(
            f"{_PREFIX}_last_price",
            "Price relayed by the last dispatched cycle",
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    @contextmanager
    def track_cycle(self) -> Iterator[None]:
        """Track the duration of one cycle and stamp its completion time."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._cycle_duration.observe(time.monotonic() - start)
            self._last_cycle.set(time.time())

    def record_outcome(self, outcome: CycleOutcome) -> None:
        """Fold a cycle's counts into the counters."""
        if outcome.error is not None:
            self._cycles.labels(result="error").inc()
            return
        self._cycles.labels(result="ok").inc()
        self._subscribers.set(outcome.attempted)
        if outcome.sample is not None:
            self._last_price.set(outcome.sample.value)
        if outcome.succeeded:
            self._deliveries.labels(result="succeeded").inc(outcome.succeeded)
        if outcome.failed:
            self._deliveries.labels(result="failed").inc(outcome.failed)
