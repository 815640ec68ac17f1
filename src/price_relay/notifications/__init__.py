"""Notifications: outbound webhook delivery.

Provides:
- ``WebhookClient``: posts a text message to one webhook URL
"""

from __future__ import annotations

from price_relay.notifications.webhook import WebhookClient

__all__ = ["WebhookClient"]
