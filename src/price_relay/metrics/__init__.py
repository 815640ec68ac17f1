"""Prometheus metrics for the relay loop and HTTP API."""

from __future__ import annotations

from price_relay.metrics.collector import MetricsCollector, RelayMetrics

__all__ = ["MetricsCollector", "RelayMetrics"]
