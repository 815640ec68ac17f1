"""Relay loop: scheduled sampling and webhook fan-out.

Provides:
- ``Scheduler``: coalescing repeating timer driving one cycle per tick
- ``CycleExecutor``: fetch subscribers, fetch a sample, dispatch
- ``FanOutDispatcher``: concurrent, independent delivery to all subscribers
- ``ShutdownCoordinator``: couples scheduler and server shutdown
"""

from __future__ import annotations

from price_relay.relay.cycle import CycleExecutor
from price_relay.relay.dispatcher import FanOutDispatcher
from price_relay.relay.models import CycleOutcome, Sample, Subscriber, format_price
from price_relay.relay.scheduler import Scheduler
from price_relay.relay.shutdown import ShutdownCoordinator

__all__ = [
    "CycleExecutor",
    "CycleOutcome",
    "FanOutDispatcher",
    "Sample",
    "Scheduler",
    "ShutdownCoordinator",
    "Subscriber",
    "format_price",
]
