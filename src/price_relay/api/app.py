"""FastAPI application factory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.responses import Response

from price_relay import __version__
from price_relay.api.dependencies import get_subscriptions
from price_relay.api.jobs import router as jobs_router
from price_relay.api.middleware.metrics import PrometheusMiddleware
from price_relay.config.settings import AppConfig
from price_relay.errors.definitions import ErrDatastoreUnavailable
from price_relay.errors.relay_errors import RelayError
from price_relay.subscriptions.repository import SubscriptionRepository  # noqa: TC001

if TYPE_CHECKING:
    from price_relay.metrics.collector import RelayMetrics
    from price_relay.notifications.webhook import WebhookClient

logger = logging.getLogger(__name__)


def _build_api_router() -> APIRouter:
    router = APIRouter(prefix="/api")

    @router.get("/", tags=["base"])
    async def health(
        subscriptions: Annotated[SubscriptionRepository, Depends(get_subscriptions)],
    ) -> dict[str, str | int]:
        """Round-trip the subscriber store."""
        try:
            count = await subscriptions.count()
        except Exception as exc:
            logger.warning("Health check failed: %s", exc)
            raise ErrDatastoreUnavailable from exc
        return {"status": "ok", "subscribers": count}

    router.include_router(jobs_router)
    return router


def create_app(
    *,
    config: AppConfig | None = None,
    subscriptions: SubscriptionRepository | None = None,
    webhooks: WebhookClient | None = None,
    metrics: RelayMetrics | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    The host process owns the datastore and HTTP clients; it passes them in
    here so the API and the relay loop share the same instances.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.
        subscriptions: Subscriber store used by the routes.
        webhooks: Outbound webhook client used to validate new URLs.
        metrics: Relay metrics whose registry is exposed on ``/metrics``.
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="price-relay",
        version=__version__,
        description="Scheduled price relay to webhook subscribers",
    )

    app.state.config = config
    app.state.subscriptions = subscriptions
    app.state.webhooks = webhooks
    app.state.metrics = metrics

    # -- Error handler --
    @app.exception_handler(RelayError)
    async def _relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": exc.message},
        )

    # -- Prometheus --
    if metrics is not None and config.metrics.enabled:
        app.add_middleware(PrometheusMiddleware, registry=metrics.registry)

        @app.get("/metrics", tags=["base"], include_in_schema=False)
        async def metrics_endpoint() -> Response:
            """Prometheus metrics endpoint."""
            return Response(
                content=generate_latest(metrics.registry),
                media_type="text/plain; version=0.0.4; charset=utf-8",
            )

    app.include_router(_build_api_router())

    return app
