"""Application entry point: relay loop plus inbound API in one process."""

from __future__ import annotations

import asyncio
import logging

from price_relay.api.app import create_app
from price_relay.api.server import APIServer
from price_relay.config.settings import AppConfig
from price_relay.datastore.client import Datastore
from price_relay.metrics.collector import RelayMetrics
from price_relay.notifications.webhook import WebhookClient
from price_relay.quotes.client import QuoteClient
from price_relay.relay.cycle import CycleExecutor
from price_relay.relay.dispatcher import FanOutDispatcher
from price_relay.relay.scheduler import Scheduler
from price_relay.relay.shutdown import ShutdownCoordinator
from price_relay.subscriptions.models import Base
from price_relay.subscriptions.repository import SubscriptionRepository

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


async def run_relay(
    config: AppConfig,
    datastore: Datastore,
    quotes: QuoteClient,
    webhooks: WebhookClient,
) -> None:
    """Wire the relay loop and API server, run until both have stopped."""
    metrics = RelayMetrics()
    subscriptions = SubscriptionRepository(datastore)

    dispatcher = FanOutDispatcher(webhooks, timeout=config.scheduler.delivery_timeout)
    executor = CycleExecutor(
        quotes,
        subscriptions,
        dispatcher,
        timeout=config.scheduler.cycle_timeout,
    )
    scheduler = Scheduler(executor, metrics=metrics) if config.scheduler.enabled else None

    app = create_app(
        config=config,
        subscriptions=subscriptions,
        webhooks=webhooks,
        metrics=metrics,
    )
    server = APIServer(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.log_level.lower(),
    )

    stop = asyncio.Event()
    coordinator = ShutdownCoordinator(
        scheduler,
        stop,
        server.shutdown,
        shutdown_timeout=config.server.shutdown_timeout,
    )
    coordinator.install_signal_handlers()

    if scheduler is not None:
        scheduler.start(stop, config.scheduler.interval)
    else:
        logger.warning("Relay loop disabled; serving the API only")
    await coordinator.run(server.serve())


async def serve(config: AppConfig) -> None:
    """Open the datastore and HTTP clients, run the relay, then release them."""
    datastore = Datastore(config.db)
    await datastore.open(base=Base)
    try:
        await datastore.ping()
        logger.info("Database connected")

        quotes = QuoteClient(config.quote)
        webhooks = WebhookClient(timeout=config.webhook.timeout)
        await quotes.connect()
        await webhooks.connect()
        try:
            await run_relay(config, datastore, quotes, webhooks)
        finally:
            await webhooks.close()
            await quotes.close()
    finally:
        await datastore.close()
        logger.info("Database closed")


def main() -> None:
    """Start price-relay."""
    config = AppConfig()
    logging.basicConfig(level=config.log_level.upper(), format=LOG_FORMAT)
    if not config.quote.api_key:
        msg = "PRICERELAY_QUOTE__API_KEY is required to start the relay"
        raise SystemExit(msg)
    asyncio.run(serve(config))


if __name__ == "__main__":
    main()
