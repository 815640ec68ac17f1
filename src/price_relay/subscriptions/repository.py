"""Subscriptions repository."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from price_relay.errors.definitions import ErrSubscriptionDuplicate
from price_relay.relay.models import Subscriber
from price_relay.subscriptions.models import Subscription

if TYPE_CHECKING:
    from price_relay.datastore.client import Datastore


class SubscriptionRepository:
    """Data access layer for webhook subscriptions."""

    def __init__(self, datastore: Datastore) -> None:
        self._ds = datastore

    async def create(self, url: str) -> str:
        """Persist a new subscription and return its ID.

        Raises:
            RelayError: ``ErrSubscriptionDuplicate`` if *url* is already registered.
        """
        subscription = Subscription(id=str(uuid.uuid4()), url=url)
        async with self._ds.session() as session:
            session.add(subscription)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ErrSubscriptionDuplicate from exc
        return subscription.id

    async def get(self, subscription_id: str) -> Subscription | None:
        """Find a subscription by primary key."""
        async with self._ds.session() as session:
            return await session.get(Subscription, subscription_id)

    async def count(self) -> int:
        """Return the number of registered subscriptions."""
        async with self._ds.session() as session:
            result = await session.execute(select(func.count(Subscription.id)))
            return result.scalar() or 0

    async def fetch_subscribers(self) -> list[Subscriber]:
        """Return a fresh snapshot of every subscriber."""
        async with self._ds.session() as session:
            result = await session.execute(select(Subscription.id, Subscription.url))
            return [Subscriber(id=row.id, endpoint=row.url) for row in result]
