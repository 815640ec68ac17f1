"""Subscriber registration.

A webhook URL is only stored after a test message was delivered to it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from price_relay.api.dependencies import get_config, get_subscriptions, get_webhooks
from price_relay.config.settings import AppConfig  # noqa: TC001
from price_relay.errors.definitions import ErrWebhookUnreachable
from price_relay.notifications.webhook import WebhookClient  # noqa: TC001
from price_relay.subscriptions.repository import SubscriptionRepository  # noqa: TC001

logger = logging.getLogger(__name__)

router = APIRouter(tags=["jobs"])


class JobCreateRequest(BaseModel):
    """Request body for registering a webhook."""

    url: str


class JobCreateResponse(BaseModel):
    """ID of the newly registered webhook."""

    id: str


@router.post("/jobs", status_code=201)
async def create_job(
    body: JobCreateRequest,
    config: Annotated[AppConfig, Depends(get_config)],
    subscriptions: Annotated[SubscriptionRepository, Depends(get_subscriptions)],
    webhooks: Annotated[WebhookClient, Depends(get_webhooks)],
) -> JobCreateResponse:
    """Validate the webhook with a test message, then register it."""
    try:
        async with asyncio.timeout(config.webhook.validation_timeout):
            await webhooks.send(body.url, config.webhook.test_message)
    except TimeoutError as exc:
        logger.info("Test message to new webhook timed out")
        raise ErrWebhookUnreachable from exc
    except Exception as exc:
        logger.info("Could not send test webhook: %s", exc)
        raise ErrWebhookUnreachable from exc

    job_id = await subscriptions.create(body.url)
    logger.info("Registered webhook %s", job_id)
    return JobCreateResponse(id=job_id)
