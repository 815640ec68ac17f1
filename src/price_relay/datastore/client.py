"""Subscriber store connection: one async engine per process.

SQLite (aiosqlite) is the default and suits a single relay process;
PostgreSQL (asyncpg) gets a bounded connection pool.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from price_relay.config.settings import DatabaseEngine

if TYPE_CHECKING:
    from sqlalchemy.orm import DeclarativeBase

    from price_relay.config.settings import DatabaseConfig

_NOT_OPEN = "Datastore is not open. Call open() first."


def engine_options(config: DatabaseConfig) -> dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` under *config*."""
    options: dict[str, Any] = {"echo": config.debug_sql}
    if config.engine is DatabaseEngine.POSTGRESQL:
        options.update(
            pool_size=config.max_idle_connections,
            max_overflow=max(0, config.max_open_connections - config.max_idle_connections),
            pool_pre_ping=True,
        )
    return options


class Datastore:
    """Owns the engine and hands out sessions.

    Usage::

        ds = Datastore(db_config)
        await ds.open(base=Base)
        await ds.ping()
        async with ds.session() as session:
            ...
        await ds.close()
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError(_NOT_OPEN)
        return self._engine

    async def open(self, *, base: type[DeclarativeBase] | None = None) -> None:
        """Connect, and create the tables of *base* that do not exist yet."""
        engine = create_async_engine(self._config.dsn, **engine_options(self._config))
        if base is not None:
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(base.metadata.create_all)
            except Exception:
                await engine.dispose()
                raise
        self._engine = engine
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)

    async def ping(self, timeout: float | None = None) -> None:
        """Run ``SELECT 1``; raises ``TimeoutError`` if it takes over *timeout* seconds."""
        engine = self.engine
        async with asyncio.timeout(timeout or self._config.ping_timeout):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

    def session(self) -> AsyncSession:
        if self._sessions is None:
            raise RuntimeError(_NOT_OPEN)
        return self._sessions()

    async def close(self) -> None:
        """Dispose the engine; a no-op when not open."""
        engine, self._engine, self._sessions = self._engine, None, None
        if engine is not None:
            await engine.dispose()
