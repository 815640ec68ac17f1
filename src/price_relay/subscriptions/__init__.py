"""Subscriptions: persistent registry of webhook endpoints."""

from __future__ import annotations

from price_relay.subscriptions.models import Base, Subscription
from price_relay.subscriptions.repository import SubscriptionRepository

__all__ = ["Base", "Subscription", "SubscriptionRepository"]
