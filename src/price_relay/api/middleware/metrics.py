"""Request metrics for the relay API.

- ``relay_api_requests_total`` counter  (method, route, status_code)
- ``relay_api_request_duration_seconds`` histogram  (method, route)
- ``relay_api_registrations_total`` counter  (result: created, duplicate,
  unreachable, invalid, error) for ``POST /api/jobs``

Requests are labelled by route template, not raw path, so unknown URLs
collapse into a single ``unmatched`` series.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

if TYPE_CHECKING:
    from collections.abc import Callable

    from prometheus_client import CollectorRegistry
    from starlette.requests import Request
    from starlette.responses import Response

UNMATCHED_ROUTE = "unmatched"
REGISTRATION_ROUTE = "/api/jobs"

_REGISTRATION_RESULTS = {
    201: "created",
    400: "unreachable",
    409: "duplicate",
    422: "invalid",
}


def route_template(request: Request) -> str:
    """Return the path template of the route that will handle *request*."""
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match is Match.FULL:
            return getattr(route, "path", UNMATCHED_ROUTE)
    return UNMATCHED_ROUTE


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Counts and times API requests, and tallies webhook registrations."""

    def __init__(self, app: object, *, registry: CollectorRegistry) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._requests = Counter(
            "relay_api_requests",
            "API requests by route and status",
            ("method", "route", "status_code"),
            registry=registry,
        )
        self._latency = Histogram(
            "relay_api_request_duration_seconds",
            "API request latency",
            ("method", "route"),
            registry=registry,
        )
        self._registrations = Counter(
            "relay_api_registrations",
            "Webhook registration attempts by result",
            ("result",),
            registry=registry,
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:  # type: ignore[type-arg]
        route = route_template(request)
        start = time.monotonic()
        response: Response = await call_next(request)
        self._latency.labels(request.method, route).observe(time.monotonic() - start)
        self._requests.labels(request.method, route, str(response.status_code)).inc()

        if route == REGISTRATION_ROUTE and request.method == "POST":
            result = _REGISTRATION_RESULTS.get(response.status_code, "error")
            self._registrations.labels(result).inc()
        return response
