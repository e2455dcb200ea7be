# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""MySQL async adapter using aiomysql with connection pooling.

Uses connection-per-request model: acquire() gets from pool,
release() returns to pool. Statements run in autocommit mode.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import aiomysql

from .base import DbAdapter, Params, QueryResult

if TYPE_CHECKING:
    from ...config import PoolConfig

logger = logging.getLogger(__name__)


class MysqlAdapter(DbAdapter):
    """MySQL/MariaDB adapter over an aiomysql pool.

    The pool is created lazily on first acquire() and holds at most
    ``config.pool`` connections; further acquire() calls wait for a release.
    Rows are returned as dicts (DictCursor).
    """

    def __init__(self, config: PoolConfig):
        self.config = config
        self._pool: aiomysql.Pool | None = None
        self._lock = asyncio.Lock()

    async def _ensure_pool(self) -> None:
        """Initialize connection pool if not already open."""
        if self._pool is not None:
            return

        async with self._lock:
            if self._pool is not None:
                return
            config = self.config
            try:
                self._pool = await asyncio.wait_for(
                    aiomysql.create_pool(
                        host=config.host,
                        port=config.port,
                        user=config.user,
                        password=config.password,
                        db=config.database,
                        charset=config.charset,
                        minsize=1,
                        maxsize=config.pool,
                        autocommit=True,
                        connect_timeout=config.connect_timeout,
                        cursorclass=aiomysql.DictCursor,
                    ),
                    timeout=config.connect_timeout + 1,
                )
            except asyncio.TimeoutError:
                raise TimeoutError(
                    f"MySQL connection timed out after {config.connect_timeout}s. "
                    "Check credentials and server availability."
                ) from None
            except Exception as e:
                raise ConnectionError(f"MySQL connection failed: {e}") from e

            logger.debug(
                "MySQL pool opened: %s:%s/%s (max %d)",
                config.host, config.port, config.database, config.pool,
            )

    async def acquire(self) -> aiomysql.Connection:
        """Acquire connection from pool."""
        await self._ensure_pool()
        return await self._pool.acquire()

    async def release(self, conn: aiomysql.Connection) -> None:
        """Return connection to pool, or close it if the pool was shut down."""
        if self._pool is None:
            conn.close()
            return
        await self._pool.release(conn)

    async def shutdown(self) -> None:
        """Close connection pool (application shutdown)."""
        if self._pool:
            self._pool.close()
            await self._pool.wait_closed()
            self._pool = None
            logger.debug("MySQL pool closed")

    async def execute(
        self, conn: aiomysql.Connection, query: str, params: Params = None
    ) -> list[dict[str, Any]] | QueryResult:
        """Execute statement, return rows or QueryResult."""
        async with conn.cursor() as cur:
            await cur.execute(query, params)
            if cur.description is not None:
                return list(await cur.fetchall())
            return QueryResult(affected_rows=cur.rowcount, insert_id=cur.lastrowid)
