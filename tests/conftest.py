"""Shared test fixtures for the price-relay test suite."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from price_relay.errors.collaborator_errors import WebhookError
from price_relay.relay.models import CycleOutcome, Sample, Subscriber

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path


# ---------------------------------------------------------------------------
# Fakes for the relay's collaborator ports
# ---------------------------------------------------------------------------


class FakePrices:
    """Price source returning a fixed value, optionally slow or failing."""

    def __init__(
        self,
        value: float = 64213.4,
        *,
        error: Exception | None = None,
        delay: float = 0.0,
        log: list[str] | None = None,
    ) -> None:
        self.value = value
        self.error = error
        self.delay = delay
        self.calls = 0
        self._log = log if log is not None else []

    async def fetch_sample(self) -> Sample:
        self.calls += 1
        self._log.append("price")
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return Sample(value=self.value, observed_at=datetime.now(tz=UTC))


class FakeDirectory:
    """Subscriber directory backed by a plain list."""

    def __init__(
        self,
        subscribers: list[Subscriber] | None = None,
        *,
        error: Exception | None = None,
        log: list[str] | None = None,
    ) -> None:
        self.subscribers = subscribers or []
        self.error = error
        self.calls = 0
        self._log = log if log is not None else []

    async def fetch_subscribers(self) -> list[Subscriber]:
        self.calls += 1
        self._log.append("subscribers")
        if self.error is not None:
            raise self.error
        return list(self.subscribers)


class FakeTransport:
    """Delivery transport whose behaviour is chosen per endpoint.

    Modes: ``ok`` (default), ``fail`` (raises at once), ``hang`` (never
    returns on its own), ``slow`` (succeeds after ``slow_delay`` seconds).
    """

    def __init__(self, modes: dict[str, str] | None = None, *, slow_delay: float = 0.1) -> None:
        self.modes = modes or {}
        self.slow_delay = slow_delay
        self.attempts: list[str] = []
        self.delivered: list[tuple[str, str]] = []
        self.active = 0
        self.max_active = 0

    async def deliver_one(self, endpoint: str, payload: str) -> None:
        self.attempts.append(endpoint)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            mode = self.modes.get(endpoint, "ok")
            if mode == "fail":
                raise WebhookError("received non-2xx response: 500 | ()", response_status=500)
            if mode == "hang":
                await asyncio.Event().wait()
            if mode == "slow":
                await asyncio.sleep(self.slow_delay)
            self.delivered.append((endpoint, payload))
        finally:
            self.active -= 1


class FakeExecutor:
    """Stands in for ``CycleExecutor``; records when each cycle ran."""

    def __init__(
        self,
        *,
        delay: float = 0.0,
        outcome: CycleOutcome | None = None,
        error: Exception | None = None,
    ) -> None:
        self.delay = delay
        self.outcome = outcome or CycleOutcome(attempted=1, succeeded=1)
        self.error = error
        self.starts: list[float] = []
        self.ends: list[float] = []
        self.stops: list[asyncio.Event | None] = []
        self.active = 0
        self.max_active = 0

    @property
    def calls(self) -> int:
        return len(self.starts)

    async def run_cycle(self, *, stop: asyncio.Event | None = None) -> CycleOutcome:
        loop = asyncio.get_running_loop()
        self.starts.append(loop.time())
        self.stops.append(stop)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return self.outcome
        finally:
            self.active -= 1
            self.ends.append(loop.time())


class FakeServer:
    """Inbound server stand-in: ``serve`` blocks until ``shutdown`` releases it."""

    def __init__(
        self,
        *,
        error: Exception | None = None,
        exit_on_its_own: bool = False,
        hang_on_shutdown: bool = False,
    ) -> None:
        self.error = error
        self.exit_on_its_own = exit_on_its_own
        self.hang_on_shutdown = hang_on_shutdown
        self.shutdown_calls = 0
        self._release = asyncio.Event()

    async def serve(self) -> None:
        if self.error is not None:
            raise self.error
        if self.exit_on_its_own:
            return
        await self._release.wait()

    async def shutdown(self) -> None:
        self.shutdown_calls += 1
        self._release.set()
        if self.hang_on_shutdown:
            await asyncio.Event().wait()


def make_subscribers(*endpoints: str) -> list[Subscriber]:
    return [Subscriber(id=f"sub-{i}", endpoint=url) for i, url in enumerate(endpoints)]


@pytest.fixture
def fakes():
    """Expose the fake collaborator classes to tests."""

    class _Fakes:
        Prices = FakePrices
        Directory = FakeDirectory
        Transport = FakeTransport
        Executor = FakeExecutor
        Server = FakeServer
        subscribers = staticmethod(make_subscribers)

    return _Fakes


# ---------------------------------------------------------------------------
# Configuration and storage
# ---------------------------------------------------------------------------


@pytest.fixture
def app_config(tmp_path: Path):
    """Provide a test AppConfig with safe defaults."""
    from price_relay.config.settings import AppConfig, DatabaseConfig, QuoteConfig

    return AppConfig(
        debug=True,
        db=DatabaseConfig(dsn=f"sqlite+aiosqlite:///{tmp_path / 'relay.db'}"),
        quote=QuoteConfig(api_key="test-key"),
    )


@pytest.fixture
async def datastore(app_config) -> AsyncIterator:
    """Open a file-backed SQLite datastore with all tables created."""
    from price_relay.datastore.client import Datastore
    from price_relay.subscriptions.models import Base

    ds = Datastore(app_config.db)
    await ds.open(base=Base)
    yield ds
    await ds.close()
