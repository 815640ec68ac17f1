"""Scheduler lifecycle: start once, tick, stop on signal.

The ``Scheduler`` owns one supervising asyncio task that waits for either
the next tick or the stop signal.  Cycles run inline in that task, so two
cycles can never overlap.  Ticks sit on a fixed grid anchored at
``start()``; ticks missed while a cycle was running are dropped rather
than replayed back-to-back.
"""

from __future__ import annotations

import asyncio
import logging
import math
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from price_relay.metrics.collector import RelayMetrics
    from price_relay.relay.cycle import CycleExecutor

logger = logging.getLogger(__name__)


def next_tick(origin: float, now: float, interval: float) -> float:
    """Return the first grid point ``origin + k * interval`` strictly after *now*."""
    elapsed = max(0.0, now - origin)
    return origin + (math.floor(elapsed / interval) + 1) * interval


class Scheduler:
    """Runs relay cycles on a coalescing repeating timer.

    Usage::

        stop = asyncio.Event()
        scheduler = Scheduler(executor, metrics=relay_metrics)
        scheduler.start(stop, interval=600)
        ...
        stop.set()
        await scheduler.done().wait()
    """

    def __init__(self, executor: CycleExecutor, *, metrics: RelayMetrics | None = None) -> None:
        self._executor = executor
        self._metrics = metrics
        self._start_lock = threading.Lock()
        self._done: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    def start(self, stop: asyncio.Event, interval: float) -> None:
        """Spawn the supervising task and return immediately.

        Only the first successful call has any effect; later calls are no-ops.
        Safe to call from several threads at once.

        Raises:
            ValueError: If *interval* is not positive.
            RuntimeError: If there is no running event loop.
        """
        if interval <= 0:
            msg = f"interval must be positive, got {interval!r}"
            raise ValueError(msg)
        with self._start_lock:
            if self._done is not None:
                return
            done = asyncio.Event()
            runner = self._run(stop, interval, done)
            try:
                task = asyncio.create_task(runner, name="relay-scheduler")
            except RuntimeError:
                runner.close()
                raise
            # Published only once the task exists, so a failed start can be retried.
            self._task = task
            self._done = done
        logger.info("Scheduler started with a %gs interval", interval)

    def done(self) -> asyncio.Event:
        """Return the completion signal, set once the supervising task exits.

        Raises:
            RuntimeError: If the scheduler was never started.
        """
        if self._done is None:
            msg = "Scheduler is not started. Call start() first."
            raise RuntimeError(msg)
        return self._done

    async def _run(self, stop: asyncio.Event, interval: float, done: asyncio.Event) -> None:
        loop = asyncio.get_running_loop()
        origin = loop.time()
        deadline = origin + interval
        try:
            while True:
                try:
                    await asyncio.wait_for(stop.wait(), timeout=max(0.0, deadline - loop.time()))
                except TimeoutError:
                    pass
                else:
                    break
                await self._tick(stop)
                # The timer may wake a hair early; never reuse the tick just served.
                deadline = next_tick(origin, max(loop.time(), deadline), interval)
        finally:
            done.set()
            logger.info("Scheduler stopped")

    async def _tick(self, stop: asyncio.Event) -> None:
        try:
            if self._metrics:
                with self._metrics.track_cycle():
                    outcome = await self._executor.run_cycle(stop=stop)
                self._metrics.record_outcome(outcome)
            else:
                outcome = await self._executor.run_cycle(stop=stop)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Relay cycle crashed")
            return

        if outcome.error is not None:
            logger.warning("Relay cycle failed: %s", outcome.error)
        else:
            logger.info(
                "Relay cycle finished: %d attempted, %d succeeded, %d failed",
                outcome.attempted,
                outcome.succeeded,
                outcome.failed,
            )
