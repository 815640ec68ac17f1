"""Coupled shutdown of the inbound server and the scheduler.

The process may only exit once both subsystems have quiesced.  Either a
termination signal or the server stopping on its own (e.g. a bind error)
sets the shared stop event, which cancels the scheduler and triggers the
server's bounded graceful shutdown.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from price_relay.relay.scheduler import Scheduler

logger = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT = 15.0  # seconds


class ShutdownCoordinator:
    """Waits for the server and the scheduler to both finish.

    With no scheduler (the relay loop is disabled) only the server is
    waited for.

    Usage::

        coordinator = ShutdownCoordinator(scheduler, stop, server.shutdown)
        coordinator.install_signal_handlers()
        await coordinator.run(server.serve())
    """

    def __init__(
        self,
        scheduler: Scheduler | None,
        stop: asyncio.Event,
        shutdown_server: Callable[[], Awaitable[None]],
        *,
        shutdown_timeout: float = SHUTDOWN_TIMEOUT,
    ) -> None:
        self._scheduler = scheduler
        self._stop = stop
        self._shutdown_server = shutdown_server
        self._shutdown_timeout = shutdown_timeout

    def install_signal_handlers(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Route SIGINT and SIGTERM to the stop event."""
        loop = loop or asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._on_signal, sig)

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down", sig.name)
        self._stop.set()

    async def run(self, serve: Awaitable[None]) -> None:
        """Run *serve* until it returns, then wait for everything to quiesce.

        Server failures are logged, not raised; the scheduler is stopped
        either way.
        """
        watcher = asyncio.create_task(self._shutdown_server_on_stop(), name="server-shutdown")
        try:
            await serve
        except Exception:
            logger.exception("Server failed due to an unexpected error")
        else:
            logger.info("Server stopped listening")
        finally:
            # A server that stops on its own must still take the scheduler down.
            self._stop.set()
            await watcher
            if self._scheduler is not None:
                await self._scheduler.done().wait()
            logger.info("Graceful exit")

    async def _shutdown_server_on_stop(self) -> None:
        await self._stop.wait()
        try:
            async with asyncio.timeout(self._shutdown_timeout):
                await self._shutdown_server()
        except TimeoutError:
            logger.warning("Server shutdown exceeded %gs", self._shutdown_timeout)
        except Exception:
            logger.exception("Server shutdown failed")
