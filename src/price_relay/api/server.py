"""Uvicorn host for the inbound API.

Signal handling is left to the process's shutdown coordinator, so uvicorn's
own SIGINT/SIGTERM capture is disabled here.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

import uvicorn

from price_relay.errors.relay_errors import ServerError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


class _CoordinatedServer(uvicorn.Server):
    """``uvicorn.Server`` that leaves process signals alone."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class APIServer:
    """Runs the FastAPI app until asked to stop.

    Usage::

        server = APIServer(app, host="0.0.0.0", port=4000)
        task = asyncio.create_task(server.serve())
        ...
        await server.shutdown()
    """

    def __init__(self, app: FastAPI, *, host: str, port: int, log_level: str = "info") -> None:
        self._server = _CoordinatedServer(
            uvicorn.Config(app, host=host, port=port, log_level=log_level),
        )
        self._stopped = asyncio.Event()
        self._shutdown_requested = False

    @property
    def started(self) -> bool:
        """Whether the server got as far as listening."""
        return bool(self._server.started)

    async def serve(self) -> None:
        """Serve requests until shutdown; blocks.

        Raises:
            ServerError: If the server could not start listening.
        """
        try:
            await self._server.serve()
        except SystemExit as exc:
            # uvicorn exits the process when it cannot bind.
            msg = f"server exited during startup (code {exc.code})"
            raise ServerError(msg) from exc
        finally:
            self._stopped.set()
        if not self._server.started and not self._shutdown_requested:
            msg = "server stopped before it started listening"
            raise ServerError(msg)

    async def shutdown(self) -> None:
        """Stop accepting connections and wait for in-flight requests.

        If the caller's deadline cancels this wait, open connections are
        dropped.
        """
        self._shutdown_requested = True
        self._server.should_exit = True
        try:
            await self._stopped.wait()
        except asyncio.CancelledError:
            self._server.force_exit = True
            raise
        logger.info("API server shut down")
