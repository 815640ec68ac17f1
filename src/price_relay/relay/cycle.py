"""One relay cycle: fetch subscribers, fetch a sample, fan out."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import TYPE_CHECKING

from price_relay.errors.cycle_errors import CycleCancelledError, CycleTimeoutError
from price_relay.relay.models import CycleOutcome, format_price

if TYPE_CHECKING:
    from collections.abc import Callable

    from price_relay.relay.dispatcher import FanOutDispatcher
    from price_relay.relay.models import Sample
    from price_relay.relay.ports import PriceSource, SubscriberDirectory

logger = logging.getLogger(__name__)

CYCLE_TIMEOUT = 10.0  # seconds


class CycleExecutor:
    """Runs a single fetch-and-deliver cycle under a fixed time budget.

    Subscriber fetch strictly precedes the price fetch, which strictly
    precedes dispatch.  A failing fetch aborts the cycle with zero delivery
    attempts; failing deliveries only show up in the counts.
    """

    def __init__(
        self,
        prices: PriceSource,
        directory: SubscriberDirectory,
        dispatcher: FanOutDispatcher,
        *,
        timeout: float = CYCLE_TIMEOUT,
        formatter: Callable[[Sample], str] = format_price,
    ) -> None:
        self._prices = prices
        self._directory = directory
        self._dispatcher = dispatcher
        self._timeout = timeout
        self._formatter = formatter

    async def run_cycle(self, *, stop: asyncio.Event | None = None) -> CycleOutcome:
        """Execute one cycle.

        Args:
            stop: The caller's stop signal.  If already set, the cycle is
                reported as cancelled without touching any collaborator.

        Returns:
            The cycle's ``CycleOutcome``; fetch failures are carried in
            ``outcome.error`` rather than raised.
        """
        if stop is not None and stop.is_set():
            return CycleOutcome(error=CycleCancelledError())

        deadline = asyncio.get_running_loop().time() + self._timeout

        step = "subscriber fetch"
        try:
            async with asyncio.timeout_at(deadline):
                subscribers = await self._directory.fetch_subscribers()
                step = "price fetch"
                sample = await self._prices.fetch_sample()
            payload = self._formatter(sample)
        except TimeoutError:
            return CycleOutcome(error=CycleTimeoutError(step, self._timeout))
        except Exception as exc:
            return CycleOutcome(error=exc)

        logger.debug("Relaying %s to %d subscribers", payload, len(subscribers))
        outcome = await self._dispatcher.deliver(payload, subscribers, deadline=deadline)
        return dataclasses.replace(outcome, sample=sample)
