"""HTTP middleware."""

from price_relay.api.middleware.metrics import PrometheusMiddleware

__all__ = ["PrometheusMiddleware"]
