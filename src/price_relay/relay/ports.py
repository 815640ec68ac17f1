"""Collaborator boundaries consumed by the relay loop.

Callers bound each call with ``asyncio.timeout``; implementations raise on
failure and must let ``asyncio.CancelledError`` propagate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from price_relay.relay.models import Sample, Subscriber


class PriceSource(Protocol):
    """Produces one price sample per call."""

    async def fetch_sample(self) -> Sample: ...


class SubscriberDirectory(Protocol):
    """Returns the full current list of subscribers."""

    async def fetch_subscribers(self) -> Sequence[Subscriber]: ...


class DeliveryTransport(Protocol):
    """Sends a rendered payload to one endpoint."""

    async def deliver_one(self, endpoint: str, payload: str) -> None: ...
