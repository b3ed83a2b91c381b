"""Pytest configuration and fixtures.

The fakes below stand in for asyncpg's pool and connection. They record every
statement sent so tests can assert on the exact transaction envelope.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from postgres_mcp.pool import ConnectionPool


class FakeDatabaseError(Exception):
    """Stands in for an asyncpg.PostgresError."""


class FakeConnection:
    """Records statements; fails or blocks on configured SQL."""

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        failures: dict[str, BaseException] | None = None,
        block_on: str | None = None,
        status: str = "OK",
    ):
        self.rows = rows if rows is not None else []
        self.failures = failures or {}
        self.block_on = block_on
        self.status = status
        self.executed: list[str] = []
        self.fetch_args: list[tuple[Any, ...]] = []
        self.blocked = asyncio.Event()

    async def _run(self, sql: str) -> None:
        self.executed.append(sql)
        await asyncio.sleep(0)
        if sql in self.failures:
            raise self.failures[sql]
        if self.block_on is not None and sql == self.block_on:
            self.blocked.set()
            await asyncio.Event().wait()

    async def execute(self, sql: str, *args: Any) -> str:
        await self._run(sql)
        return self.status

    async def fetch(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        await self._run(sql)
        self.fetch_args.append(args)
        return self.rows


class FakePool:
    """Hands out a fresh FakeConnection per acquire, built from shared settings."""

    def __init__(self, **connection_kwargs: Any):
        self.connection_kwargs = connection_kwargs
        self.connections: list[FakeConnection] = []
        self.acquire_count = 0
        self.release_count = 0
        self.acquire_error: BaseException | None = None
        self.closed = False

    @property
    def last(self) -> FakeConnection:
        return self.connections[-1]

    async def acquire(self) -> FakeConnection:
        if self.acquire_error is not None:
            raise self.acquire_error
        await asyncio.sleep(0)
        conn = FakeConnection(**self.connection_kwargs)
        self.connections.append(conn)
        self.acquire_count += 1
        return conn

    async def release(self, conn: FakeConnection) -> None:
        self.release_count += 1

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_pool():
    return FakePool()


@pytest.fixture
def pool(fake_pool):
    return ConnectionPool(fake_pool)


@pytest.fixture
def db_error():
    return FakeDatabaseError('syntax error at or near "SELEC"')
