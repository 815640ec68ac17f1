"""FastAPI dependency injection helpers.

The host process stores its collaborators on ``app.state`` before the
server starts; these ``Depends()``-compatible callables hand them to
route handlers.
"""

from __future__ import annotations

from fastapi import Request

from price_relay.config.settings import AppConfig  # noqa: TC001
from price_relay.errors.definitions import ErrServiceNotReady
from price_relay.notifications.webhook import WebhookClient  # noqa: TC001
from price_relay.subscriptions.repository import SubscriptionRepository  # noqa: TC001


def get_config(request: Request) -> AppConfig:
    """Retrieve the application config from ``app.state``."""
    config: AppConfig = request.app.state.config
    return config


def get_subscriptions(request: Request) -> SubscriptionRepository:
    """Retrieve the subscription repository from ``app.state``.

    Raises:
        RelayError: ``ErrServiceNotReady`` if the host has not wired it.
    """
    repo: SubscriptionRepository | None = getattr(request.app.state, "subscriptions", None)
    if repo is None:
        raise ErrServiceNotReady
    return repo


def get_webhooks(request: Request) -> WebhookClient:
    """Retrieve the outbound webhook client from ``app.state``.

    Raises:
        RelayError: ``ErrServiceNotReady`` if the host has not wired it.
    """
    webhooks: WebhookClient | None = getattr(request.app.state, "webhooks", None)
    if webhooks is None:
        raise ErrServiceNotReady
    return webhooks
