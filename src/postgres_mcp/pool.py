"""
Connection pool service.

A single ``ConnectionPool`` is created at startup, handed to the catalog and
the dispatcher, and closed on shutdown. It wraps an ``asyncpg`` pool and adds
the bookkeeping the lifecycle engine relies on: every acquired connection is
counted until released, and ``lease()`` releases on every exit path.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncGenerator

import orjson

from postgres_mcp.exceptions import ConnectionAcquireError

if TYPE_CHECKING:
    from postgres_mcp.config import ServerConfig

logger = logging.getLogger(__name__)

JSON_TYPES = ("json", "jsonb")


def _encode_json(value: Any) -> str:
    return orjson.dumps(value).decode()


async def init_connection(conn: Any) -> None:
    """Decode json/jsonb columns into Python values instead of raw text."""
    for type_name in JSON_TYPES:
        await conn.set_type_codec(
            type_name,
            encoder=_encode_json,
            decoder=orjson.loads,
            schema="pg_catalog",
        )


class ConnectionPool:
    """
    Lends database connections to one operation at a time.

    Args:
        pool: An ``asyncpg.Pool`` (or anything with the same
            ``acquire``/``release``/``close`` coroutines).
    """

    def __init__(self, pool: Any):
        self._pool = pool
        self._outstanding = 0
        self._closed = False

    @classmethod
    async def connect(cls, config: ServerConfig) -> ConnectionPool:
        """Open an asyncpg pool for ``config.database_url``."""
        import asyncpg

        pool = await asyncpg.create_pool(
            config.database_url,
            min_size=config.pool_min_size,
            max_size=config.pool_max_size,
            command_timeout=config.command_timeout,
            init=init_connection,
        )
        logger.info(
            "Connection pool opened (min=%d, max=%d)",
            config.pool_min_size,
            config.pool_max_size,
        )
        return cls(pool)

    @property
    def outstanding(self) -> int:
        """Number of connections acquired and not yet released."""
        return self._outstanding

    @property
    def closed(self) -> bool:
        return self._closed

    async def acquire(self) -> Any:
        """Borrow a connection, waiting for capacity if necessary."""
        try:
            conn = await self._pool.acquire()
        except Exception as exc:
            raise ConnectionAcquireError(exc) from exc
        self._outstanding += 1
        return conn

    async def release(self, conn: Any) -> None:
        """Return a connection obtained from ``acquire``."""
        try:
            await self._pool.release(conn)
        finally:
            self._outstanding -= 1

    @asynccontextmanager
    async def lease(self) -> AsyncGenerator[Any, None]:
        """Acquire a connection for the duration of the block."""
        conn = await self.acquire()
        try:
            yield conn
        finally:
            await self.release(conn)

    async def close(self) -> None:
        """Drain outstanding leases and close every connection."""
        if self._closed:
            return
        self._closed = True
        if self._outstanding:
            logger.info("Waiting for %d leased connection(s) to be released", self._outstanding)
        await self._pool.close()
        logger.info("Connection pool closed")
