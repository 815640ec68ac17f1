"""Fan-out delivery of one payload to every subscriber.

Each subscriber gets exactly one attempt per cycle, running concurrently
with all others under its own deadline.  The dispatcher returns only once
every attempt has succeeded, failed, or timed out; one subscriber's
failure never touches another's attempt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from price_relay.relay.models import CycleOutcome

if TYPE_CHECKING:
    from collections.abc import Sequence

    from price_relay.relay.models import Subscriber
    from price_relay.relay.ports import DeliveryTransport

logger = logging.getLogger(__name__)

DELIVERY_TIMEOUT = 10.0  # seconds


class FanOutDispatcher:
    """Delivers a payload to all subscribers concurrently.

    Usage::

        dispatcher = FanOutDispatcher(webhook_client, timeout=10.0)
        outcome = await dispatcher.deliver("64213", subscribers)
    """

    def __init__(self, transport: DeliveryTransport, *, timeout: float = DELIVERY_TIMEOUT) -> None:
        self._transport = transport
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        """Per-attempt delivery budget in seconds."""
        return self._timeout

    async def deliver(
        self,
        payload: str,
        subscribers: Sequence[Subscriber],
        *,
        deadline: float | None = None,
    ) -> CycleOutcome:
        """Send *payload* to every subscriber and wait for all attempts.

        Args:
            payload: Rendered message body.
            subscribers: Snapshot of endpoints for this cycle; order is not significant.
            deadline: Optional absolute event-loop time bounding every attempt.

        Returns:
            A ``CycleOutcome`` with attempted/succeeded/failed counts.
        """
        if not subscribers:
            return CycleOutcome()

        loop = asyncio.get_running_loop()
        when = loop.time() + self._timeout
        if deadline is not None:
            when = min(when, deadline)

        results = await asyncio.gather(
            *(self._attempt(sub, payload, when) for sub in subscribers),
        )
        succeeded = sum(results)
        return CycleOutcome(
            attempted=len(results),
            succeeded=succeeded,
            failed=len(results) - succeeded,
        )

    async def _attempt(self, subscriber: Subscriber, payload: str, when: float) -> bool:
        """Deliver to one subscriber; report success instead of raising."""
        try:
            async with asyncio.timeout_at(when):
                await self._transport.deliver_one(subscriber.endpoint, payload)
        except TimeoutError:
            logger.warning("Delivery to subscriber %s timed out", subscriber.id)
            return False
        except Exception as exc:
            logger.warning("Delivery to subscriber %s failed: %s", subscriber.id, exc)
            return False
        logger.debug("Delivered to subscriber %s", subscriber.id)
        return True
